"""County/city canonicalization for CWA location strings.

CWA location names start with the county or city the epicentre (or the
reporting station) belongs to, e.g. "花蓮縣政府南南東方 25.3 公里". Every
top-level administrative unit in Taiwan has a three-character name, so
the region is the first three characters once the name is normalized.
"""

# Stand-in location for nodes without a LocationName. It is canonicalized
# like any other name, so the published region is UNKNOWN_REGION.
UNKNOWN_LOCATION = "未知縣市"
UNKNOWN_REGION = "未知縣"

# Alternate glyph for "Tai" used in official names (臺北市 / 台北市).
_ALT_TAI = "臺"
_STD_TAI = "台"

COUNTIES = (
    "台北市", "新北市", "桃園市", "台中市", "台南市", "高雄市",
    "基隆市", "新竹市", "嘉義市",
    "新竹縣", "苗栗縣", "彰化縣", "南投縣", "雲林縣", "嘉義縣",
    "屏東縣", "宜蘭縣", "花蓮縣", "台東縣", "澎湖縣", "金門縣", "連江縣",
)

# Counties upgraded or merged into special municipalities (2010, 2014).
# Older catalog entries still carry the former names.
ALIASES = {
    "台北縣": "新北市",
    "桃園縣": "桃園市",
    "台中縣": "台中市",
    "台南縣": "台南市",
    "高雄縣": "高雄市",
}


def canonical_region(name):
    """Map a free-text location name to its county/city.

    Replaces the alternate "Tai" glyph, keeps the first three characters,
    trims whitespace, then resolves former county names. Names that match
    no table entry are returned truncated as-is. Idempotent.

    Examples:
        >>> canonical_region("臺北市信義區")
        '台北市'
        >>> canonical_region("台北縣政府東方 10 公里")
        '新北市'
    """
    prefix = name.replace(_ALT_TAI, _STD_TAI)[:3].strip()
    return ALIASES.get(prefix, prefix)


def is_known_region(region):
    """True for the 22 current counties and cities."""
    return region in COUNTIES
