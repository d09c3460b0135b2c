"""Creative template.

Bold colour blocks, card gallery for projects and a floating contact
button. Aimed at designers and front-end profiles.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from portfolio_forge.templates.base import PortfolioTemplate

__all__ = ["CreativeTemplate"]

_BODY = """\
<header id="hero" class="hero">
  <div class="hero-inner">
    <p class="eyebrow">{{ hero.title }}</p>
    <h1>{{ hero.name }}</h1>
    <p class="lead">{{ hero.bio }}</p>
  </div>
  {% if hero.image %}<img class="portrait" src="{{ hero.image | ensure_http }}" alt="{{ hero.name }}">{% endif %}
</header>

<section id="about" class="block block-light">
  <h2>Hello!</h2>
  <p>{{ about.description }}</p>
  {% if about.skills %}
  <ul class="chips">{% for skill in about.skills %}<li>{{ skill }}</li>{% endfor %}</ul>
  {% endif %}
</section>

{% if has_projects %}
<section id="projects" class="block block-dark">
  <h2>Selected work</h2>
  <div class="gallery">
    {% for project in projects %}
    {% set link = project.live_url or project.github_url %}
    <a class="card" href="{{ link | ensure_http if link else '#projects' }}">
      {% if project.image %}<img src="{{ project.image | ensure_http }}" alt="">{% endif %}
      <span class="card-index">{{ '%02d' | format(loop.index) }}</span>
      <h3>{{ project.title }}</h3>
      <p>{{ project.description | truncate(160, True) }}</p>
    </a>
    {% endfor %}
  </div>
</section>
{% endif %}

{% if has_experience %}
<section id="experience" class="block block-light">
  <h2>Where I've been</h2>
  {% for job in experience %}
  <div class="stop">
    <h3>{{ job.company }}</h3>
    <p class="role">{{ job.title }} &middot; {{ date_range(job.start_date, job.end_date, job.current) }}</p>
    <p>{{ job.description }}</p>
  </div>
  {% endfor %}
</section>
{% endif %}

{% if has_education %}
<section id="education" class="block block-light">
  <h2>Learning</h2>
  {% for school in education %}
  <p><strong>{{ school.institution }}</strong> {{ school.degree }}{% if school.field %} ({{ school.field }}){% endif %}</p>
  {% endfor %}
</section>
{% endif %}

<section id="contact" class="block block-accent">
  <h2>Let's make something</h2>
  {% if contact.message %}<p>{{ contact.message }}</p>{% endif %}
  {% if contact.email %}<a class="cta" href="mailto:{{ contact.email }}">{{ contact.email }}</a>{% endif %}
</section>
{% if contact.email %}<a class="floating-contact" href="mailto:{{ contact.email }}" aria-label="Email">&#9993;</a>{% endif %}
"""

_CSS = """\
:root {
  --primary: #f43f5e;
  --secondary: #facc15;
  --dark: #18181b;
  --light: #fafaf9;
}
* { box-sizing: border-box; }
body { margin: 0; font-family: 'Poppins', sans-serif; color: var(--dark); background: var(--light); }
.hero { min-height: 80vh; display: flex; align-items: center; justify-content: space-between; gap: 2rem; padding: 4rem 8vw; background: var(--primary); color: #fff; }
.hero h1 { font-size: clamp(2.5rem, 7vw, 5rem); margin: 0.25rem 0; }
.eyebrow { text-transform: uppercase; letter-spacing: 0.2em; margin: 0; }
.lead { max-width: 560px; font-size: 1.2rem; }
.portrait { width: 240px; height: 240px; object-fit: cover; border-radius: 40% 60% 55% 45%; border: 6px solid var(--secondary); }
.block { padding: 5rem 8vw; }
.block-dark { background: var(--dark); color: var(--light); }
.block-accent { background: var(--secondary); }
.chips { display: flex; flex-wrap: wrap; gap: 0.5rem; list-style: none; padding: 0; }
.chips li { border: 2px solid var(--dark); border-radius: 999px; padding: 0.25rem 0.9rem; }
.gallery { display: grid; grid-template-columns: repeat(auto-fill, minmax(260px, 1fr)); gap: 1.5rem; }
.card { display: block; padding: 1.5rem; border-radius: 16px; background: #27272a; color: inherit; text-decoration: none; transition: transform 0.2s, background 0.2s; }
.card:hover { transform: rotate(-1deg) scale(1.02); background: var(--primary); }
.card img { width: 100%; border-radius: 10px; }
.card-index { font-weight: 700; color: var(--secondary); }
.role { font-style: italic; }
.cta { font-size: 1.5rem; color: var(--dark); font-weight: 700; }
.floating-contact { position: fixed; right: 1.5rem; bottom: 1.5rem; width: 3.5rem; height: 3.5rem; border-radius: 50%; background: var(--dark); color: var(--secondary); display: flex; align-items: center; justify-content: center; font-size: 1.5rem; text-decoration: none; }
.is-visible { opacity: 1; transform: none; }
.block { transition: opacity 0.6s, transform 0.6s; }
@media (max-width: 720px) { .hero { flex-direction: column-reverse; text-align: center; } }
"""

_JS = """\
document.addEventListener('DOMContentLoaded', function () {
  var blocks = document.querySelectorAll('.block');
  if (!('IntersectionObserver' in window)) { return; }
  var observer = new IntersectionObserver(function (entries) {
    entries.forEach(function (entry) {
      if (entry.isIntersecting) { entry.target.classList.add('is-visible'); }
    });
  }, { threshold: 0.15 });
  blocks.forEach(function (block) { observer.observe(block); });
});
"""


class CreativeTemplate(PortfolioTemplate):
    """Colour-blocked gallery layout."""

    description = "Bold, colourful layout with a project gallery for creative work"
    features = ("project-gallery", "colour-blocks", "floating-contact", "animations")
    is_premium = True
    stylesheets = (
        "https://fonts.googleapis.com/css2?family=Poppins:wght@400;600;700&display=swap",
    )

    @property
    def template_id(self) -> str:
        return "creative"

    @property
    def name(self) -> str:
        return "Creative"

    @property
    def body(self) -> str:
        return _BODY

    @property
    def css(self) -> str:
        return _CSS

    @property
    def js(self) -> str:
        return _JS

    @property
    def config(self) -> MappingProxyType[str, Any]:
        return MappingProxyType(
            {
                "colors": {"primary": "#f43f5e", "secondary": "#facc15", "dark": "#18181b"},
                "customizable": ["colors", "fonts", "custom_css"],
            }
        )
