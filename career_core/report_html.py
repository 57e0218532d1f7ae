from __future__ import annotations
from html import escape
from typing import Dict, Any, List

from . import config
from .results_export import field_rows

def _row(r: Dict[str, Any], recommended: set) -> str:
    mark = " *" if r['field'] in recommended else ""
    return (f"<tr><td>{r['rank']}</td><td>{escape(r['field'])}{mark}</td><td>{r['raw_score']:.1f}</td>"
            f"<td>{r['response_count']}</td><td>{r['normalized_score']:.2f}</td>"
            f"<td>{r['relative_score']:.1f}</td><td>{r['confidence_score']:.1f}</td></tr>")

def render_report_html(results: Dict[str, Any], title: str = "Career Report", response_id: str | None = None) -> str:
    details = results.get("details", {}) or {}
    best = results.get("bestMatch") or details.get("bestMatch")
    recommended = set(results.get("recommendedFields") or [])
    rows = "\n".join(_row(r, recommended) for r in field_rows(results))

    best_html = ""
    if isinstance(best, dict) and best.get("field"):
        best_html = (
            "<div class=\"banner best\">"
            f"<b>Best match:</b> {escape(str(best.get('field')))} "
            f"({best.get('confidenceScore', 0)}% · {escape(str(best.get('confidenceLevel', '')))} confidence)"
            "</div>"
        )

    strengths: List[str] = [escape(str(s)) for s in results.get("strengths") or []]
    insights: List[str] = [f"<li>{escape(str(i))}</li>" for i in details.get("insights") or []]
    insights_html = f"<h3>Insights</h3><ul>{''.join(insights)}</ul>" if insights else ""

    export_links = ""
    if config.RESULTS_EXPORT_ENABLED and response_id:
        rid = escape(str(response_id))
        export_links = (
            "<p class=\"export-links\">"
            f"<a href=\"/responses/{rid}/scores.json\">Download scores (JSON)</a> · "
            f"<a href=\"/responses/{rid}/scores.csv\">Download scores (CSV)</a>"
            "</p>"
        )

    return f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<title>{escape(title)}</title>
<style>
 body{{font-family:system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,'Helvetica Neue',Arial}}
 .wrap{{max-width:960px;margin:40px auto;padding:0 16px}}
 h1{{margin:0 0 16px}}
 .summary{{font-size:1.1rem;margin:8px 0 16px}}
 .banner{{padding:12px 16px;border-radius:6px;margin:16px 0}}
 .banner.best{{background:#e6f4ea;border:1px solid #34a853;color:#0d652d}}
 table{{border-collapse:collapse;width:100%}}
 th,td{{text-align:left}}
</style>
</head>
<body>
<div class="wrap">
  <h1>{escape(title)}</h1>
  <div class="summary">{escape(str(results.get('summary', '')))}</div>
  {best_html}
  <p><b>Strengths:</b> {', '.join(strengths)}</p>

  <table border='1' cellpadding='6' cellspacing='0'>
    <thead><tr><th>#</th><th>Field</th><th>Raw</th><th>Responses</th><th>Normalized</th><th>Relative</th><th>Confidence</th></tr></thead>
    <tbody>{rows}</tbody>
  </table>
  <p><i>* recommended field.</i></p>

  {insights_html}
  {export_links}
</div>
</body>
</html>"""

def export_report_html(results: Dict[str, Any], path: str, title: str = "Career Report") -> str:
    html = render_report_html(results, title=title)
    with open(path, "w", encoding="utf-8") as f:
        f.write(html)
    return path
