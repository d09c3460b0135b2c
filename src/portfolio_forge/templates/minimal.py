"""Minimal template.

Single serif column on white, no script, no imagery beyond the portrait.
Suited to backend and infrastructure profiles where text carries the page.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from portfolio_forge.templates.base import PortfolioTemplate

__all__ = ["MinimalTemplate"]

_BODY = """\
<main class="page">
  <header id="hero" class="hero">
    <h1>{{ hero.name }}</h1>
    {% if hero.title %}<p class="title">{{ hero.title }}</p>{% endif %}
    {% if hero.bio %}<p class="bio">{{ hero.bio }}</p>{% endif %}
    {% if hero.social_links %}
    <p class="links">
      {% for platform, url in hero.social_links | dictsort %}
      <a href="{{ url | ensure_http }}">{{ platform }}</a>{% if not loop.last %} / {% endif %}
      {% endfor %}
    </p>
    {% endif %}
  </header>

  {% if about.description or about.skills %}
  <section id="about">
    <h2>About</h2>
    {% if about.description %}<p>{{ about.description }}</p>{% endif %}
    {% if about.skills %}<p class="skills">{{ about.skills | join(" / ") }}</p>{% endif %}
  </section>
  {% endif %}

  {% if has_projects %}
  <section id="projects">
    <h2>Projects</h2>
    {% for project in projects %}
    <div class="entry">
      <h3>
        {% if project.live_url or project.github_url %}
        <a href="{{ (project.live_url or project.github_url) | ensure_http }}">{{ project.title }}</a>
        {% else %}{{ project.title }}{% endif %}
      </h3>
      <p>{{ project.description }}</p>
      {% if project.tech_stack %}<p class="meta">{{ project.tech_stack | join(", ") }}</p>{% endif %}
    </div>
    {% endfor %}
  </section>
  {% endif %}

  {% if has_experience %}
  <section id="experience">
    <h2>Experience</h2>
    {% for job in experience %}
    <div class="entry">
      <h3>{{ job.title }}{% if job.company %}, {{ job.company }}{% endif %}</h3>
      <p class="meta">{{ date_range(job.start_date, job.end_date, job.current) }}</p>
      <p>{{ job.description }}</p>
    </div>
    {% endfor %}
  </section>
  {% endif %}

  {% if has_education %}
  <section id="education">
    <h2>Education</h2>
    {% for school in education %}
    <div class="entry">
      <h3>{{ school.institution }}</h3>
      <p class="meta">{{ school.degree }}{% if school.field %}, {{ school.field }}{% endif %}</p>
    </div>
    {% endfor %}
  </section>
  {% endif %}

  <footer id="contact">
    {% if contact.email %}<a href="mailto:{{ contact.email }}">{{ contact.email }}</a>{% endif %}
    {% if contact.location %}<span>{{ contact.location }}</span>{% endif %}
  </footer>
</main>
"""

_CSS = """\
:root {
  --text: #111827;
  --muted: #6b7280;
  --accent: #111827;
}
body { margin: 0; font-family: Georgia, 'Times New Roman', serif; color: var(--text); background: #fff; line-height: 1.7; }
.page { max-width: 680px; margin: 0 auto; padding: 4rem 1.25rem; }
h1 { font-size: 2.4rem; margin: 0; }
h2 { font-size: 1rem; text-transform: uppercase; letter-spacing: 0.1em; color: var(--muted); margin-top: 3rem; }
h3 { font-size: 1.1rem; margin-bottom: 0.25rem; }
a { color: var(--accent); }
.title { font-size: 1.25rem; color: var(--muted); margin-top: 0.25rem; }
.meta { color: var(--muted); font-size: 0.9rem; margin: 0; }
.entry { margin-bottom: 1.75rem; }
footer { margin-top: 4rem; display: flex; gap: 1.5rem; color: var(--muted); }
"""


class MinimalTemplate(PortfolioTemplate):
    """Text-first single column."""

    description = "Clean, text-first single column with no scripts"
    features = ("single-column", "print-friendly", "no-javascript")

    @property
    def template_id(self) -> str:
        return "minimal"

    @property
    def name(self) -> str:
        return "Minimal"

    @property
    def body(self) -> str:
        return _BODY

    @property
    def css(self) -> str:
        return _CSS

    @property
    def config(self) -> MappingProxyType[str, Any]:
        return MappingProxyType(
            {"colors": {"text": "#111827", "accent": "#111827"}, "customizable": ["colors", "fonts"]}
        )
