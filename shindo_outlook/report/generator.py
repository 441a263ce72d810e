"""Outlook report generator.

Renders a published snapshot as a Markdown report:
- Run summary (update time, updater, event count)
- Per-region probability tables by intensity and horizon
- Annual rates with confidence bounds (optional)
- Disclaimer

Usage:
    from shindo_outlook.report import generate_report
    text = generate_report(snapshot, rates=rate_summary(events, now))
"""

import re

from quakelib.formatting import fmt, fmt_num, fmt_pct
from quakelib.tables import md_table
from shindo_outlook.analysis.regions import COUNTIES, is_known_region
from shindo_outlook.models import HORIZONS, horizon_label

_INTENSITY_RE = re.compile(r"^(\d+)\s*(弱|強)?")
_SUFFIX_ORDER = {None: 0, "弱": 0, "強": 1}


def intensity_sort_key(label):
    """Order labels as 1, 2, 3, 4, 5弱, 5強, 6弱, 6強, 7; unknown labels last."""
    m = _INTENSITY_RE.match(label)
    if not m:
        return (1, 0, 0, label)
    return (0, int(m.group(1)), _SUFFIX_ORDER[m.group(2)], label)


def region_sort_key(region):
    """Official county order first, anything else alphabetically after."""
    if is_known_region(region):
        return (0, COUNTIES.index(region), region)
    return (1, 0, region)


def generate_summary_section(snapshot):
    analysis = snapshot.get("analysisData") or {}
    n_cells = sum(len(v) for v in analysis.values())
    lines = ["## Summary", ""]
    lines.append(f"- Updated: {snapshot.get('updateTime', '—')}")
    lines.append(f"- Updated by: {snapshot.get('updaterName', '—')}")
    lines.append(f"- Events analysed: {fmt_num(snapshot.get('totalEvents'))}")
    lines.append(f"- Regions: {len(analysis)}; region/intensity cells: {n_cells}")
    if not analysis:
        lines.append("")
        lines.append("*No probabilities: less than one year of catalog history.*")
    return lines


def generate_region_section(region, by_intensity):
    labels = [horizon_label(t) for t in HORIZONS]
    rows = []
    for intensity in sorted(by_intensity, key=intensity_sort_key):
        probs = by_intensity[intensity]
        rows.append([intensity] + [fmt_pct(probs.get(label)) for label in labels])
    return [
        f"### {region}",
        "",
        md_table(["Intensity"] + labels, rows, ["l"] + ["r"] * len(labels)),
    ]


def generate_rates_section(rates):
    if not rates:
        return []
    years = rates[0]["window_years"]
    level = f"{fmt(rates[0].get('confidence', 0.95) * 100, 0)}%"
    rows = []
    for r in sorted(rates, key=lambda r: (region_sort_key(r["region"]),
                                          intensity_sort_key(r["intensity"]))):
        rows.append([
            r["region"], r["intensity"], fmt_num(r["count"]),
            fmt(r["rate"], 3), f"{fmt(r['lower'], 3)}–{fmt(r['upper'], 3)}",
        ])
    return [
        "## Annual rates",
        "",
        f"Observation window: {fmt(years, 2)} years. Intervals are exact {level} Poisson bounds.",
        "",
        md_table(["Region", "Intensity", "Events", "Rate (/yr)", f"{level} CI"],
                 rows, ["l", "l", "r", "r", "r"]),
    ]


def generate_report(snapshot, rates=None):
    """Render *snapshot* (see ``publish.build_snapshot``) as Markdown."""
    analysis = snapshot.get("analysisData") or {}
    lines = ["# Felt-Earthquake Outlook by County", ""]

    lines.extend(generate_summary_section(snapshot))
    lines.append("")

    if analysis:
        lines.append("## Probability of at least one event")
        lines.append("")
        for region in sorted(analysis, key=region_sort_key):
            lines.extend(generate_region_section(region, analysis[region]))
            lines.append("")

    rate_lines = generate_rates_section(rates)
    if rate_lines:
        lines.extend(rate_lines)
        lines.append("")

    disclaimer = snapshot.get("disclaimer")
    if disclaimer:
        lines.append("---")
        lines.append("")
        lines.append(f"*{disclaimer}*")
        lines.append("")

    return "\n".join(lines)
