"""Modern developer template.

Dark navigation bar, gradient hero, skill cards, project grid and an
experience timeline. Scroll spy and reveal animations in the script.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from portfolio_forge.templates.base import PortfolioTemplate

__all__ = ["ModernDevTemplate"]

# ---------------------------------------------------------------------------
# Body
# ---------------------------------------------------------------------------

_BODY = """\
<nav class="navbar">
  <div class="nav-container">
    <a class="nav-logo" href="#hero">{{ hero.name or "Portfolio" }}</a>
    <button class="mobile-toggle" aria-label="Toggle navigation">&#9776;</button>
    <ul class="nav-links">
      <li><a class="nav-link" href="#about">About</a></li>
      {% if has_projects %}<li><a class="nav-link" href="#projects">Projects</a></li>{% endif %}
      {% if has_experience %}<li><a class="nav-link" href="#experience">Experience</a></li>{% endif %}
      {% if has_education %}<li><a class="nav-link" href="#education">Education</a></li>{% endif %}
      <li><a class="nav-link" href="#contact">Contact</a></li>
    </ul>
  </div>
</nav>

<header id="hero" class="section hero">
  <div class="hero-content">
    {% if hero.image %}<img class="hero-image" src="{{ hero.image | ensure_http }}" alt="{{ hero.name }}">{% endif %}
    <h1 class="hero-name">{{ hero.name }}</h1>
    <p class="hero-title" data-typing="{{ hero.title }}">{{ hero.title }}</p>
    <p class="hero-bio">{{ hero.bio }}</p>
    {% if hero.social_links %}
    <div class="social-links">
      {% for platform, url in hero.social_links | dictsort %}
      <a class="social-link" href="{{ url | ensure_http }}" rel="noopener" target="_blank">{{ platform | title }}</a>
      {% endfor %}
    </div>
    {% endif %}
  </div>
</header>

<section id="about" class="section about">
  <h2 class="section-title">About Me</h2>
  <p class="about-description">{{ about.description }}</p>
  {% if about.skills %}
  <div class="tech-grid">
    {% for skill in about.skills %}
    <div class="tech-card">{{ skill }}</div>
    {% endfor %}
  </div>
  {% endif %}
  {% if about.interests %}
  <p class="interests">Interests: {{ about.interests | join(", ") }}</p>
  {% endif %}
</section>

{% if has_projects %}
<section id="projects" class="section projects">
  <h2 class="section-title">Projects</h2>
  <div class="project-grid">
    {% for project in projects %}
    <article class="project-card">
      {% if project.image %}<img class="project-image" src="{{ project.image | ensure_http }}" alt="{{ project.title }}">{% endif %}
      <h3 class="project-title">{{ project.title }}</h3>
      <p class="project-description">{{ project.description | truncate(220, True) }}</p>
      {% if project.key_features %}
      <ul class="project-features">
        {% for feature in project.key_features[:4] %}<li>{{ feature }}</li>{% endfor %}
      </ul>
      {% endif %}
      {% if project.tech_stack %}
      <div class="tech-stack">
        {% for tech in project.tech_stack %}<span class="tech-tag">{{ tech }}</span>{% endfor %}
      </div>
      {% endif %}
      <div class="project-links">
        {% if project.github_url %}<a href="{{ project.github_url | ensure_http }}" target="_blank" rel="noopener">Code</a>{% endif %}
        {% if project.live_url %}<a href="{{ project.live_url | ensure_http }}" target="_blank" rel="noopener">Live</a>{% endif %}
      </div>
    </article>
    {% endfor %}
  </div>
</section>
{% endif %}

{% if has_experience %}
<section id="experience" class="section experience">
  <h2 class="section-title">Experience</h2>
  <div class="timeline">
    {% for job in experience %}
    <div class="timeline-item">
      <div class="timeline-header">
        <h3>{{ job.title }}{% if job.company %} &middot; {{ job.company }}{% endif %}</h3>
        <span class="timeline-dates">{{ date_range(job.start_date, job.end_date, job.current) }}</span>
      </div>
      {% if job.location %}<p class="timeline-location">{{ job.location }}</p>{% endif %}
      <p>{{ job.description }}</p>
      {% if job.highlights %}
      <ul>{% for item in job.highlights %}<li>{{ item }}</li>{% endfor %}</ul>
      {% endif %}
    </div>
    {% endfor %}
  </div>
</section>
{% endif %}

{% if has_education %}
<section id="education" class="section education">
  <h2 class="section-title">Education</h2>
  {% for school in education %}
  <div class="education-item">
    <h3>{{ school.degree }}{% if school.field %} in {{ school.field }}{% endif %}</h3>
    <p class="institution">{{ school.institution }}</p>
    <span class="timeline-dates">{{ date_range(school.start_date, school.end_date) }}</span>
    {% if school.description %}<p>{{ school.description }}</p>{% endif %}
  </div>
  {% endfor %}
</section>
{% endif %}

<section id="contact" class="section contact">
  <h2 class="section-title">Get In Touch</h2>
  {% if contact.message %}<p class="contact-message">{{ contact.message }}</p>{% endif %}
  <ul class="contact-list">
    {% if contact.email %}<li><a href="mailto:{{ contact.email }}">{{ contact.email }}</a></li>{% endif %}
    {% if contact.phone %}<li>{{ contact.phone }}</li>{% endif %}
    {% if contact.location %}<li>{{ contact.location }}</li>{% endif %}
    {% for platform, url in contact.social_links | dictsort %}
    <li><a href="{{ url | ensure_http }}" target="_blank" rel="noopener">{{ platform | title }}</a></li>
    {% endfor %}
  </ul>
</section>

<footer class="footer">
  <p>&copy; {{ hero.name or "Portfolio" }}. Built with portfolio-forge.</p>
</footer>
"""

# ---------------------------------------------------------------------------
# Stylesheet
# ---------------------------------------------------------------------------

_CSS = """\
:root {
  --primary: #6366f1;
  --secondary: #22d3ee;
  --background: #0f172a;
  --surface: #1e293b;
  --text: #e2e8f0;
  --muted: #94a3b8;
}
* { box-sizing: border-box; margin: 0; padding: 0; }
html { scroll-behavior: smooth; }
body { font-family: 'Raleway', sans-serif; background: var(--background); color: var(--text); line-height: 1.6; }
a { color: var(--secondary); text-decoration: none; }
.navbar { position: fixed; top: 0; width: 100%; background: rgba(15, 23, 42, 0.9); backdrop-filter: blur(8px); z-index: 10; }
.nav-container { max-width: 1100px; margin: 0 auto; display: flex; align-items: center; justify-content: space-between; padding: 1rem 1.5rem; }
.nav-logo { font-weight: 700; color: var(--text); }
.nav-links { display: flex; gap: 1.5rem; list-style: none; }
.nav-link { color: var(--muted); }
.nav-link.active, .nav-link:hover { color: var(--primary); }
.mobile-toggle { display: none; background: none; border: 0; color: var(--text); font-size: 1.5rem; }
.section { max-width: 1100px; margin: 0 auto; padding: 6rem 1.5rem 3rem; }
.section-title { font-size: 2rem; margin-bottom: 1.5rem; color: var(--primary); }
.hero { min-height: 90vh; display: flex; align-items: center; }
.hero-image { width: 140px; height: 140px; border-radius: 50%; object-fit: cover; margin-bottom: 1rem; }
.hero-name { font-size: 3rem; background: linear-gradient(90deg, var(--primary), var(--secondary)); -webkit-background-clip: text; color: transparent; }
.hero-title { font-size: 1.5rem; color: var(--muted); }
.hero-bio { margin-top: 1rem; max-width: 640px; }
.social-links { display: flex; gap: 1rem; margin-top: 1.5rem; }
.tech-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(140px, 1fr)); gap: 0.75rem; margin-top: 1.5rem; }
.tech-card { background: var(--surface); padding: 0.75rem; border-radius: 8px; text-align: center; }
.project-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(300px, 1fr)); gap: 1.5rem; }
.project-card { background: var(--surface); border-radius: 12px; padding: 1.5rem; transition: transform 0.2s; }
.project-card:hover { transform: translateY(-4px); }
.project-image { width: 100%; border-radius: 8px; margin-bottom: 1rem; }
.tech-stack { display: flex; flex-wrap: wrap; gap: 0.5rem; margin: 1rem 0; }
.tech-tag { background: rgba(99, 102, 241, 0.2); color: var(--primary); padding: 0.2rem 0.6rem; border-radius: 999px; font-size: 0.8rem; }
.project-links { display: flex; gap: 1rem; }
.timeline { border-left: 2px solid var(--primary); padding-left: 1.5rem; }
.timeline-item { margin-bottom: 2rem; }
.timeline-header { display: flex; justify-content: space-between; flex-wrap: wrap; }
.timeline-dates, .timeline-location { color: var(--muted); font-size: 0.9rem; }
.education-item { margin-bottom: 1.5rem; }
.contact-list { list-style: none; margin-top: 1rem; }
.footer { text-align: center; padding: 2rem; color: var(--muted); }
.animate-in { animation: fade-up 0.6s ease both; }
@keyframes fade-up { from { opacity: 0; transform: translateY(20px); } to { opacity: 1; transform: none; } }
@media (max-width: 768px) {
  .mobile-toggle { display: block; }
  .nav-links { display: none; position: absolute; top: 100%; right: 0; flex-direction: column; background: var(--surface); padding: 1rem; }
  .nav-links.active { display: flex; }
  .hero-name { font-size: 2.2rem; }
}
"""

# ---------------------------------------------------------------------------
# Script
# ---------------------------------------------------------------------------

_JS = """\
document.addEventListener('DOMContentLoaded', function () {
  var sections = document.querySelectorAll('.section');
  var navLinks = document.querySelectorAll('.nav-link');

  window.addEventListener('scroll', function () {
    var current = '';
    sections.forEach(function (section) {
      if (window.scrollY >= section.offsetTop - 200) {
        current = section.getAttribute('id');
      }
    });
    navLinks.forEach(function (link) {
      link.classList.toggle('active', link.getAttribute('href') === '#' + current);
    });
  });

  var toggle = document.querySelector('.mobile-toggle');
  if (toggle) {
    toggle.addEventListener('click', function () {
      document.querySelector('.nav-links').classList.toggle('active');
    });
  }

  if ('IntersectionObserver' in window) {
    var observer = new IntersectionObserver(function (entries) {
      entries.forEach(function (entry) {
        if (entry.isIntersecting) {
          entry.target.classList.add('animate-in');
        }
      });
    }, { threshold: 0.1, rootMargin: '0px 0px -50px 0px' });
    document.querySelectorAll('.tech-card, .project-card, .timeline-item').forEach(function (el) {
      observer.observe(el);
    });
  }
});
"""


class ModernDevTemplate(PortfolioTemplate):
    """Dark, developer-focused single page."""

    description = "Dark developer portfolio with project grid and experience timeline"
    features = ("dark-theme", "project-grid", "timeline", "scroll-spy", "responsive")
    stylesheets = (
        "https://fonts.googleapis.com/css2?family=Raleway:wght@300;400;600;700&display=swap",
    )

    @property
    def template_id(self) -> str:
        return "modern-dev"

    @property
    def name(self) -> str:
        return "Modern Developer"

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
                "colors": {"primary": "#6366f1", "secondary": "#22d3ee", "background": "#0f172a"},
                "customizable": ["colors", "fonts", "custom_css"],
            }
        )
