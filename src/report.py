"""Printable HTML reports built from deep hierarchies."""

from collections.abc import Sequence
from html import escape

from models import Person, ReportNode

TREE_REPORT_CSS = """
@page { size: landscape; margin: 20mm; }
body { font-family: -apple-system, system-ui, sans-serif; padding: 0; margin: 0; background: white; color: #333; }
h1 { text-align: center; font-size: 24px; margin-bottom: 40px; color: #000; border-bottom: 1px solid #eee; padding-bottom: 15px; }
h2 { margin-bottom: 30px; color: #666; font-weight: 400; font-size: 18px; }
.ancestor-section { margin-bottom: 100px; page-break-after: always; display: flex; flex-direction: column; align-items: center; width: 100%; }

/* Tree layout */
.tree { display: inline-block; white-space: nowrap; margin: 0 auto; }
.tree ul { padding-top: 30px; position: relative; display: flex; justify-content: center; margin: 0; padding-left: 0; }
.tree li { list-style-type: none; position: relative; padding: 30px 5px 0 5px; text-align: center; display: flex; flex-direction: column; align-items: center; }

/* Connectors */
.tree li::before, .tree li::after { content: ''; position: absolute; top: 0; right: 50%; border-top: 2px solid #ccc; width: 50%; height: 30px; }
.tree li::after { right: auto; left: 50%; border-left: 2px solid #ccc; }
.tree li:only-child::after, .tree li:only-child::before { display: none; }
.tree li:only-child { padding-top: 0; }
.tree li:first-child::before, .tree li:last-child::after { border: 0 none; }
.tree li:last-child::before { border-right: 2px solid #ccc; border-radius: 0 10px 0 0; }
.tree li:first-child::after { border-radius: 10px 0 0 0; }
.tree ul ul::before { content: ''; position: absolute; top: 0; left: 50%; border-left: 2px solid #ccc; width: 0; height: 30px; }

/* Nodes */
.node-box { border: 1px solid #ddd; padding: 8px 12px; background: #fff; border-radius: 8px; min-width: 120px; display: inline-block; position: relative; z-index: 5; box-shadow: 0 2px 4px rgba(0,0,0,0.05); }
.li-content { position: relative; z-index: 10; display: inline-block; white-space: normal; }

/* Root couple */
.couple-container { display: flex; align-items: center; justify-content: center; gap: 0; }
.couple-connector { width: 20px; height: 2px; background: #ccc; margin: 0 -2px; z-index: 1; }
.root-box { border-color: #007AFF; background: #fbfdff; min-width: 120px; }
.spouse-box { border-color: #FF2D55; background: #fffafa; }

.name { font-weight: 700; font-size: 13px; margin-bottom: 4px; color: #1a1a1a; line-height: 1.2; }
.dates { font-size: 10px; color: #888; letter-spacing: 0.2px; }
.main-dates { border-top: 1px solid #f0f0f0; margin-top: 6px; padding-top: 6px; }
.internal-spouse { font-size: 11px; color: #007AFF; font-style: italic; margin: 4px 0; padding: 4px 6px; background: #f0f7ff; border-radius: 4px; }
.internal-spouse .dates { color: #555; }
"""

TEXT_REPORT_CSS = """
body { font-family: -apple-system, system-ui, sans-serif; padding: 40px; line-height: 1.6; color: #333; }
h1 { text-align: center; font-size: 24px; margin-bottom: 40px; border-bottom: 2px solid #eee; padding-bottom: 15px; }
h2 { color: #007AFF; font-size: 18px; margin-bottom: 20px; border-left: 4px solid #007AFF; padding-left: 10px; }
.ancestor-section { margin-bottom: 60px; page-break-inside: avoid; }
.text-node { margin-bottom: 8px; font-size: 14px; }
.bullet { color: #ccc; margin-right: 8px; font-weight: bold; }
.name { font-weight: 600; color: #000; }
.dates { color: #888; margin: 0 5px; }
.spouses { color: #FF2D55; font-style: italic; font-size: 13px; }
"""

INDENT_PX = 30


def format_lifespan(person: Person) -> str:
    return f"{person.birth_date or 'Unknown'} - {person.death_date or 'Present'}"


def _html_document(title: str, css: str, heading: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{escape(title)}</title>\n"
        f"<style>{css}</style>\n"
        "</head>\n"
        "<body>\n"
        f"<h1>{escape(heading)}</h1>\n"
        f"{body}"
        "</body>\n"
        "</html>\n"
    )


# ============================================================================
# Visual tree report
# ============================================================================


def _person_box(person: Person, css_class: str) -> str:
    return (
        f'<div class="{css_class}">'
        f'<div class="name">{escape(person.full_name)}</div>'
        f'<div class="dates">{escape(format_lifespan(person))}</div>'
        "</div>"
    )


def _node_content(node: ReportNode, is_root: bool) -> str:
    if is_root and node.spouses:
        # A root couple is drawn as two boxes joined by a connector
        content = (
            '<div class="couple-container">'
            f"{_person_box(node.person, 'node-box root-box')}"
            '<div class="couple-connector"></div>'
            f"{_person_box(node.spouses[0], 'node-box root-box spouse-box')}"
            "</div>"
        )
    else:
        spouse_html = "".join(
            '<div class="internal-spouse">'
            f"m. {escape(s.full_name)}<br/>"
            f'<span class="dates">{escape(format_lifespan(s))}</span>'
            "</div>"
            for s in node.spouses
        )
        content = (
            '<div class="node-box">'
            f'<div class="name">{escape(node.person.full_name)}</div>'
            f"{spouse_html}"
            f'<div class="dates main-dates">{escape(format_lifespan(node.person))}</div>'
            "</div>"
        )

    return content


def _render_tree(root: ReportNode) -> str:
    """Nested <li> markup for root and its descendants, walked with an explicit stack."""
    parts = []
    stack: list[ReportNode | str] = [root]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue

        content = _node_content(item, is_root=item is root)
        parts.append(f'<li><div class="li-content">{content}</div>')
        if item.children:
            parts.append("<ul>")
            stack.append("</ul></li>")
            stack.extend(reversed(item.children))
        else:
            parts.append("</li>")
    return "".join(parts)


def render_report(roots: Sequence[ReportNode]) -> str:
    """Render each root's descendants as a boxed, connected tree in one HTML document."""
    sections = "".join(
        '<div class="ancestor-section">\n'
        f"<h2>Lineage of {escape(root.person.full_name)}</h2>\n"
        f'<div class="tree"><ul>{_render_tree(root)}</ul></div>\n'
        "</div>\n"
        for root in roots
    )
    return _html_document(
        "Family Tree Ancestor Report", TREE_REPORT_CSS, "Family Generation Report", sections
    )


# ============================================================================
# Text (indented list) report
# ============================================================================


def _text_line(node: ReportNode, level: int) -> str:
    spouses = ", ".join(f"{s.full_name} ({format_lifespan(s)})" for s in node.spouses)
    spouse_text = f" [Spouse(s): {spouses}]" if spouses else ""

    return (
        f'<div class="text-node" style="margin-left: {level * INDENT_PX}px;">'
        '<span class="bullet">&bull;</span>'
        f'<span class="name">{escape(node.person.full_name)}</span>'
        f'<span class="dates">({escape(format_lifespan(node.person))})</span>'
        f'<span class="spouses">{escape(spouse_text)}</span>'
        "</div>\n"
    )


def _render_text_tree(root: ReportNode) -> str:
    parts = []
    stack = [(root, 0)]
    while stack:
        node, level = stack.pop()
        parts.append(_text_line(node, level))
        stack.extend((child, level + 1) for child in reversed(node.children))
    return "".join(parts)


def render_text_report(roots: Sequence[ReportNode]) -> str:
    """Render each root's descendants as an indented bullet list in one HTML document."""
    sections = "".join(
        '<div class="ancestor-section">\n'
        f"<h2>Family of {escape(root.person.full_name)}</h2>\n"
        f"{_render_text_tree(root)}"
        "</div>\n"
        for root in roots
    )
    return _html_document(
        "Family Tree Text Report",
        TEXT_REPORT_CSS,
        "Family Tree Ancestor Report (Text Format)",
        sections,
    )
