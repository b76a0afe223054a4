"""Render a section-based layout tree to HTML."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from jinja2 import DictLoader, Environment, select_autoescape

from .models import GlobalStyles, LayoutTree, Section, SectionKind

# kind -> ((field, default), ...)
SECTION_SCHEMAS: Dict[SectionKind, Tuple[Tuple[str, Any], ...]] = {
    SectionKind.HERO: (("title", ""), ("subtitle", ""), ("ctaText", ""), ("ctaLink", "#"), ("image", "")),
    SectionKind.SERVICES: (("title", "Services"), ("items", [])),
    SectionKind.FEATURES: (("title", "Features"), ("items", [])),
    SectionKind.ABOUT: (("title", "About"), ("text", ""), ("image", "")),
    SectionKind.STATS: (("items", []),),
    SectionKind.TESTIMONIALS: (("title", "Testimonials"), ("items", [])),
    SectionKind.TEAM: (("title", "Team"), ("members", [])),
    SectionKind.PRICING: (("title", "Pricing"), ("plans", [])),
    SectionKind.FAQ: (("title", "FAQ"), ("items", [])),
    SectionKind.GALLERY: (("title", "Gallery"), ("images", [])),
    SectionKind.BLOG: (("title", "Blog"), ("posts", [])),
    SectionKind.CONTACT: (("title", "Contact"), ("email", ""), ("phone", ""), ("address", "")),
    SectionKind.CTA: (("title", ""), ("text", ""), ("buttonText", ""), ("buttonLink", "#")),
    SectionKind.FOOTER: (("companyName", ""), ("links", []), ("copyright", "")),
}

SECTION_TEMPLATES: Dict[str, str] = {
    "hero.html": """<section class="hero" style="background: {{ styles.primary_color }}; color: #fff;">
  <h1 style="font-family: {{ styles.heading_font }};">{{ title }}</h1>
  {% if subtitle %}<p>{{ subtitle }}</p>{% endif %}
  {% if ctaText %}<a class="btn" href="{{ ctaLink }}">{{ ctaText }}</a>{% endif %}
  {% if image %}<img src="{{ image }}" alt="{{ title }}">{% endif %}
</section>""",
    "services.html": """<section class="services">
  <h2>{{ title }}</h2>
  <div class="grid">{% for item in items %}
    <article class="card"><h3>{{ item.title }}</h3><p>{{ item.description }}</p></article>{% endfor %}
  </div>
</section>""",
    "features.html": """<section class="features">
  <h2>{{ title }}</h2>
  <ul>{% for item in items %}
    <li><strong>{{ item.title }}</strong> {{ item.description }}</li>{% endfor %}
  </ul>
</section>""",
    "about.html": """<section class="about">
  <h2>{{ title }}</h2>
  <p>{{ text }}</p>
  {% if image %}<img src="{{ image }}" alt="{{ title }}">{% endif %}
</section>""",
    "stats.html": """<section class="stats" style="color: {{ styles.primary_color }};">{% for item in items %}
  <div class="stat"><span class="value">{{ item.value }}</span> <span class="label">{{ item.label }}</span></div>{% endfor %}
</section>""",
    "testimonials.html": """<section class="testimonials">
  <h2>{{ title }}</h2>{% for item in items %}
  <blockquote><p>{{ item.quote }}</p><cite>{{ item.author }}</cite></blockquote>{% endfor %}
</section>""",
    "team.html": """<section class="team">
  <h2>{{ title }}</h2>
  <div class="grid">{% for member in members %}
    <figure>{% if member.photo %}<img src="{{ member.photo }}" alt="{{ member.name }}">{% endif %}<figcaption>{{ member.name }} <small>{{ member.role }}</small></figcaption></figure>{% endfor %}
  </div>
</section>""",
    "pricing.html": """<section class="pricing">
  <h2>{{ title }}</h2>
  <div class="grid">{% for plan in plans %}
    <article class="card"><h3>{{ plan.name }}</h3><p class="price">{{ plan.price }}</p>
      <ul>{% for feature in plan.features or [] %}<li>{{ feature }}</li>{% endfor %}</ul></article>{% endfor %}
  </div>
</section>""",
    "faq.html": """<section class="faq">
  <h2>{{ title }}</h2>{% for item in items %}
  <details><summary>{{ item.question }}</summary><p>{{ item.answer }}</p></details>{% endfor %}
</section>""",
    "gallery.html": """<section class="gallery">
  <h2>{{ title }}</h2>
  <div class="grid">{% for image in images %}
    <img src="{{ image.src if image is mapping else image }}" alt="{{ image.alt if image is mapping else title }}" loading="lazy">{% endfor %}
  </div>
</section>""",
    "blog.html": """<section class="blog">
  <h2>{{ title }}</h2>{% for post in posts %}
  <article><h3>{{ post.title }}</h3><p>{{ post.excerpt }}</p></article>{% endfor %}
</section>""",
    "contact.html": """<section class="contact">
  <h2>{{ title }}</h2>
  {% if email %}<p><a href="mailto:{{ email }}">{{ email }}</a></p>{% endif %}
  {% if phone %}<p>{{ phone }}</p>{% endif %}
  {% if address %}<address>{{ address }}</address>{% endif %}
</section>""",
    "cta.html": """<section class="cta" style="background: {{ styles.secondary_color }}; color: #fff;">
  <h2>{{ title }}</h2>
  <p>{{ text }}</p>
  {% if buttonText %}<a class="btn" href="{{ buttonLink }}">{{ buttonText }}</a>{% endif %}
</section>""",
    "footer.html": """<footer class="site-footer">
  <strong>{{ companyName }}</strong>
  <nav>{% for link in links %}<a href="{{ link.href }}">{{ link.label }}</a> {% endfor %}</nav>
  <small>{{ copyright }}</small>
</footer>""",
    "unknown.html": """<div class="section-unknown" style="border: 2px dashed #fca5a5; background: #fef2f2; padding: 2rem; text-align: center;">
  <p style="color: #dc2626;">Component not found: {{ kind }}</p>
</div>""",
    "layout.html": """<div class="layout" style="font-family: {{ styles.font_family }}; --primary-color: {{ styles.primary_color }}; --secondary-color: {{ styles.secondary_color }};">
{% for block in sections %}{{ block | safe }}
{% endfor %}</div>""",
    "empty.html": """<div class="layout-empty"><p>No homepage found</p></div>""",
}


def _env() -> Environment:
    return Environment(
        loader=DictLoader(SECTION_TEMPLATES),
        autoescape=select_autoescape(["html", "xml"]),
    )


def section_context(kind: SectionKind, content: Dict[str, Any]) -> Dict[str, Any]:
    """Fill the schema fields for ``kind`` from ``content``, with defaults."""

    context: Dict[str, Any] = {}
    for name, default in SECTION_SCHEMAS[kind]:
        value = content.get(name, default)
        if isinstance(default, list) and not isinstance(value, list):
            value = list(default)
        context[name] = value
    return context


def render_section(section: Section, styles: GlobalStyles, env: Environment | None = None) -> str:
    env = env or _env()
    try:
        kind = SectionKind(section.type)
    except ValueError:
        return env.get_template("unknown.html").render(kind=section.type)
    template = env.get_template(f"{kind.value}.html")
    return template.render(styles=styles, **section_context(kind, section.content))


def render_layout(tree: LayoutTree) -> str:
    env = _env()
    homepage = tree.homepage
    if homepage is None:
        return env.get_template("empty.html").render()
    blocks: List[str] = [render_section(s, tree.global_styles, env) for s in homepage.sections]
    return env.get_template("layout.html").render(styles=tree.global_styles, sections=blocks)
