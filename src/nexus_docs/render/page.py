from __future__ import annotations

import html as html_lib
from dataclasses import dataclass, field
from urllib.parse import quote

from ..registry import DocumentRegistry

SIDEBAR_STORAGE_KEY = "nexus-docs-sidebar"
COLLAPSE_DURATION_MS = 260


@dataclass
class NavSection:
    section_id: str
    label: str
    keys: list[str] = field(default_factory=list)
    children: list["NavSection"] = field(default_factory=list)

    def child(self, section_id: str, label: str) -> "NavSection":
        for node in self.children:
            if node.section_id == section_id:
                return node
        node = NavSection(section_id=section_id, label=label)
        self.children.append(node)
        return node


def build_nav_tree(registry: DocumentRegistry) -> NavSection:
    """Group registry keys by their section path, keeping first-seen order.

    The returned root has an empty id; entries without a section hang off it
    directly.
    """
    root = NavSection(section_id="", label="")
    for key, entry in registry.items():
        node = root
        for section_id in entry.section:
            node = node.child(section_id, registry.section_label(section_id))
        node.keys.append(key)
    return root


def doc_href(key: str) -> str:
    return f"/?doc={quote(key, safe='')}"


def _esc(value: str) -> str:
    return html_lib.escape(value or "", quote=True)


def _render_links(registry: DocumentRegistry, keys: list[str], active_key: str, depth: int) -> str:
    if not keys:
        return ""
    items = []
    for key in keys:
        active = key == active_key
        css = "nav-link active" if active else "nav-link"
        current = ' aria-current="page"' if active else ""
        items.append(
            f'<li><a class="{css}" href="{_esc(doc_href(key))}"{current}>'
            f"{_esc(registry[key].display_label)}</a></li>"
        )
    return f'<ul class="nav-list depth-{depth}">{"".join(items)}</ul>'


def _render_section(registry: DocumentRegistry, node: NavSection, active_key: str, depth: int) -> str:
    inner = _render_links(registry, node.keys, active_key, depth + 1)
    inner += "".join(_render_section(registry, child, active_key, depth + 1) for child in node.children)
    return (
        f'<details class="nav-group depth-{depth}" data-collapse="{_esc(node.section_id)}" id="nav-{_esc(node.section_id)}" open>'
        f'<summary><span>{_esc(node.label)}</span><span class="chevron" aria-hidden="true">&rsaquo;</span></summary>'
        f"<div data-collapse-content>{inner}</div>"
        "</details>"
    )


def render_sidebar_nav(registry: DocumentRegistry, active_key: str) -> str:
    tree = build_nav_tree(registry)
    parts = [_render_links(registry, tree.keys, active_key, 0)]
    parts.extend(_render_section(registry, child, active_key, 0) for child in tree.children)
    return f'<nav class="sidebar-nav">{"".join(parts)}</nav>'


def render_tabs(registry: DocumentRegistry, active_key: str) -> str:
    tabs = []
    for key, entry in registry.items():
        active = key == active_key
        css = "tab active" if active else "tab"
        current = ' aria-current="page"' if active else ""
        tabs.append(f'<a class="{css}" href="{_esc(doc_href(key))}"{current}>{_esc(entry.tab_label)}</a>')
    return f'<div class="tabs">{"".join(tabs)}</div>'


def render_breadcrumb(registry: DocumentRegistry, active_key: str) -> str:
    labels = [registry.section_label(section_id) for section_id in registry[active_key].section]
    labels.append(registry[active_key].display_label)
    crumbs = '<span class="sep">/</span>'.join(f"<span>{_esc(label)}</span>" for label in labels)
    return f'<div class="breadcrumb">{crumbs}</div>'


_SIDEBAR_SCRIPT = """
(function initSidebar() {
  const STORAGE_KEY = '%(storage_key)s';
  const DURATION = %(duration)d;
  const reduceMotion = window.matchMedia('(prefers-reduced-motion: reduce)').matches;
  const getState = () => {
    try { return JSON.parse(localStorage.getItem(STORAGE_KEY) || '{}'); } catch (err) { return {}; }
  };
  const setState = (state) => {
    try { localStorage.setItem(STORAGE_KEY, JSON.stringify(state)); } catch (err) { /* storage disabled */ }
  };
  const animate = (details, willOpen) => {
    const content = details.querySelector('[data-collapse-content]');
    if (!content || reduceMotion || !content.animate) {
      if (willOpen) details.setAttribute('open', ''); else details.removeAttribute('open');
      return;
    }
    if (willOpen) details.setAttribute('open', '');
    const full = content.getBoundingClientRect().height;
    const start = willOpen ? 0 : full;
    const end = willOpen ? full : 0;
    content.style.overflow = 'hidden';
    const anim = content.animate(
      [{ height: start + 'px', opacity: willOpen ? 0.6 : 1 }, { height: end + 'px', opacity: willOpen ? 1 : 0.6 }],
      { duration: DURATION, easing: willOpen ? 'ease-out' : 'ease-in' }
    );
    anim.onfinish = () => {
      if (!willOpen) details.removeAttribute('open');
      content.style.height = '';
      content.style.overflow = '';
    };
  };
  const saved = getState();
  document.querySelectorAll('details[data-collapse]').forEach((details) => {
    const section = details.dataset.collapse;
    if (section && typeof saved[section] === 'boolean') {
      if (saved[section]) details.setAttribute('open', ''); else details.removeAttribute('open');
    }
    const summary = details.querySelector('summary');
    if (!summary) return;
    summary.addEventListener('click', (ev) => {
      ev.preventDefault();
      const willOpen = !details.hasAttribute('open');
      animate(details, willOpen);
      if (section) {
        const state = getState();
        state[section] = willOpen;
        setState(state);
      }
    });
  });
  const sidebar = document.getElementById('sidebar');
  const overlay = document.getElementById('sidebar-overlay');
  const setMobileOpen = (open) => {
    sidebar.classList.toggle('open', open);
    overlay.classList.toggle('open', open);
    document.body.style.overflow = open ? 'hidden' : '';
  };
  document.getElementById('menu-open').addEventListener('click', () => setMobileOpen(true));
  document.getElementById('menu-close').addEventListener('click', () => setMobileOpen(false));
  overlay.addEventListener('click', () => setMobileOpen(false));
  window.addEventListener('resize', () => { if (window.innerWidth >= 1024) setMobileOpen(false); });
})();
"""

_PAGE_STYLE = """
    :root {
      --bg: #ffffff;
      --ink: #111827;
      --muted: rgba(17, 24, 39, 0.6);
      --rule: rgba(17, 24, 39, 0.1);
      --hover: rgba(17, 24, 39, 0.05);
      --active: rgba(17, 24, 39, 0.1);
      --mono-font: "JetBrains Mono", Consolas, monospace;
    }
    @media (prefers-color-scheme: dark) {
      :root {
        --bg: #0a0a0a;
        --ink: #ededed;
        --muted: rgba(237, 237, 237, 0.6);
        --rule: rgba(255, 255, 255, 0.1);
        --hover: rgba(237, 237, 237, 0.05);
        --active: rgba(237, 237, 237, 0.1);
      }
    }
    * { box-sizing: border-box; }
    body { margin: 0; background: var(--bg); color: var(--ink); font-family: "Segoe UI", Arial, sans-serif; }
    a { color: inherit; }
    .layout { min-height: 100vh; }
    .sidebar {
      position: fixed; top: 0; left: 0; height: 100vh; width: 288px; overflow-y: auto;
      background: var(--bg); border-right: 1px solid var(--rule); padding: 20px 16px; z-index: 50;
      transform: translateX(-100%); transition: transform 0.3s ease-out;
    }
    .sidebar.open { transform: translateX(0); }
    .sidebar-overlay { position: fixed; inset: 0; background: rgba(0, 0, 0, 0.2); display: none; z-index: 40; }
    .sidebar-overlay.open { display: block; }
    .brand { display: flex; justify-content: space-between; align-items: flex-start; margin-bottom: 24px; }
    .brand a { font-size: 1.1rem; font-weight: 600; text-decoration: none; }
    .brand p { margin: 2px 0 0; font-size: 0.75rem; color: var(--muted); }
    .icon-button { border: none; background: transparent; color: inherit; padding: 8px; border-radius: 6px; cursor: pointer; }
    .icon-button:hover { background: var(--hover); }
    .nav-group summary {
      list-style: none; cursor: pointer; display: flex; justify-content: space-between; align-items: center;
      padding: 8px; border-radius: 6px; font-size: 0.72rem; letter-spacing: 0.12em; text-transform: uppercase; color: var(--muted);
    }
    .nav-group summary::-webkit-details-marker { display: none; }
    .nav-group summary:hover { background: var(--hover); }
    .nav-group .chevron { transition: transform 0.3s; }
    .nav-group[open] > summary .chevron { transform: rotate(90deg); }
    .nav-group.depth-1 > summary { padding-left: 24px; }
    .nav-group.depth-2 > summary { padding-left: 32px; }
    .nav-group.depth-3 > summary { padding-left: 40px; }
    .nav-list { list-style: none; margin: 4px 0; padding-left: 32px; }
    .nav-link { display: block; padding: 8px 12px; border-radius: 6px; text-decoration: none; font-size: 0.875rem; opacity: 0.8; transition: all 0.2s; }
    .nav-link:hover { background: var(--hover); transform: translateX(2px); }
    .nav-link.active { background: var(--active); opacity: 1; }
    .mobile-header {
      position: sticky; top: 0; z-index: 30; display: flex; align-items: center; gap: 12px;
      padding: 12px 16px; border-bottom: 1px solid var(--rule); background: var(--bg);
    }
    .mobile-header h1 { margin: 0; font-size: 0.875rem; }
    .mobile-header p { margin: 0; font-size: 0.75rem; color: var(--muted); max-width: 200px; overflow: hidden; text-overflow: ellipsis; white-space: nowrap; }
    .content { padding: 16px; }
    .container { max-width: 896px; margin: 0 auto; }
    .breadcrumb { display: none; margin-bottom: 16px; font-size: 0.75rem; color: var(--muted); }
    .breadcrumb .sep { margin: 0 8px; }
    .doc-title { font-size: 1.25rem; font-weight: 600; margin: 0 0 8px; }
    .doc-hint { font-size: 0.875rem; color: var(--muted); margin: 0 0 16px; }
    .tabs { display: flex; gap: 8px; overflow-x: auto; padding-bottom: 8px; margin-bottom: 16px; scrollbar-width: none; }
    .tab { white-space: nowrap; border: 1px solid var(--rule); border-radius: 999px; padding: 6px 12px; font-size: 0.875rem; text-decoration: none; opacity: 0.75; flex-shrink: 0; }
    .tab:hover { background: var(--hover); }
    .tab.active { background: var(--active); opacity: 1; }
    .viewer { border: 1px solid var(--rule); border-radius: 8px; overflow: hidden; }
    .article { padding: 20px; line-height: 1.65; overflow-x: auto; }
    .article pre { background: var(--hover); padding: 12px 14px; border-radius: 8px; overflow-x: auto; }
    .article code { font-family: var(--mono-font); font-size: 0.9rem; }
    .article table { border-collapse: collapse; width: 100%; }
    .article th, .article td { border: 1px solid var(--rule); padding: 6px 10px; text-align: left; }
    .article-animate { animation: rise 0.4s ease-out both; }
    @keyframes rise { from { opacity: 0; transform: translateY(6px); } to { opacity: 1; transform: translateY(0); } }
    @media (prefers-reduced-motion: reduce) {
      .article-animate, .sidebar, .nav-link, .nav-group .chevron { animation: none; transition: none; }
    }
    @media (min-width: 640px) {
      .content { padding: 24px; }
      .breadcrumb { display: block; }
      .doc-title { font-size: 1.5rem; }
    }
    @media (min-width: 1024px) {
      .layout { display: grid; grid-template-columns: 320px 1fr; }
      .sidebar { position: sticky; width: 320px; transform: none; }
      .sidebar-overlay, .mobile-header, #menu-close { display: none !important; }
      .content { padding: 32px; }
    }
"""


def render_docs_page(
    registry: DocumentRegistry,
    doc_key: str,
    body_html: str,
    site_title: str = "Nexus Docs",
    site_tagline: str = "Documentação da Plataforma Nexus",
) -> str:
    """Full viewer page; ``body_html`` is embedded as is."""
    current = registry[doc_key]
    script = _SIDEBAR_SCRIPT % {"storage_key": SIDEBAR_STORAGE_KEY, "duration": COLLAPSE_DURATION_MS}
    return (
        "<!doctype html>\n"
        "<html lang=\"pt-BR\">\n"
        "<head>\n"
        "  <meta charset=\"utf-8\" />\n"
        "  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />\n"
        f"  <title>{_esc(current.title)} · {_esc(site_title)}</title>\n"
        f"  <style>{_PAGE_STYLE}  </style>\n"
        "</head>\n"
        "<body>\n"
        "  <div class=\"layout\">\n"
        "    <div class=\"sidebar-overlay\" id=\"sidebar-overlay\"></div>\n"
        "    <aside class=\"sidebar\" id=\"sidebar\">\n"
        "      <div class=\"brand\">\n"
        f"        <div><a href=\"/\">{_esc(site_title)}</a><p>{_esc(site_tagline)}</p></div>\n"
        "        <button class=\"icon-button\" id=\"menu-close\" aria-label=\"Fechar menu\">&times;</button>\n"
        "      </div>\n"
        f"      {render_sidebar_nav(registry, doc_key)}\n"
        "    </aside>\n"
        "    <main>\n"
        "      <header class=\"mobile-header\">\n"
        "        <button class=\"icon-button\" id=\"menu-open\" aria-label=\"Abrir menu\">&#9776;</button>\n"
        f"        <div><h1>{_esc(site_title)}</h1><p>{_esc(current.title)}</p></div>\n"
        "      </header>\n"
        "      <div class=\"content\">\n"
        "        <div class=\"container\">\n"
        f"          {render_breadcrumb(registry, doc_key)}\n"
        f"          <h1 class=\"doc-title article-animate\">{_esc(current.title)}</h1>\n"
        "          <p class=\"doc-hint article-animate\">Selecione outros documentos nas abas ou no menu lateral.</p>\n"
        f"          {render_tabs(registry, doc_key)}\n"
        "          <section class=\"viewer\">\n"
        f"            <article class=\"article article-animate\" id=\"doc-content\" data-doc=\"{_esc(doc_key)}\">{body_html}</article>\n"
        "          </section>\n"
        "        </div>\n"
        "      </div>\n"
        "    </main>\n"
        "  </div>\n"
        f"  <script>{script}</script>\n"
        "</body>\n"
        "</html>\n"
    )
