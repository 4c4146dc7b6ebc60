"""
Pytest configuration and fixtures for schema intelligence tests
"""
import pytest
from datetime import datetime, timezone


BONG_TITLE = "How to Clean a Bong: Step-by-Step Guide"

BONG_CONTENT = (
    "A clean bong gives smoother hits and a better taste. Most people should clean their bong "
    "every few days. The whole job takes about 15 minutes and needs only a few supplies. "
    "Step 1: Rinse with water. Step 2: Add alcohol. Step 3: Shake and repeat. "
    "Once the bong is clear, let the glass dry completely before the next session. "
    "Regular cleaning keeps resin from building up inside the percolator and protects the "
    "borosilicate glass over time. A little care after every session saves a lot of scrubbing "
    "later on, and your bong will look as good as the day you bought it. Keep a small bottle of "
    "cleaner and a pack of plugs near the sink so the routine never feels like a chore."
)

FITNESS_TITLE = "Raising Your VO2 Max"

FITNESS_CONTENT = (
    "VO2 Max is the best single marker of aerobic fitness. Athletes track VO2 Max to judge how well "
    "their training is working. Interval workouts raise VO2 Max faster than easy mileage alone. "
    "HIIT sessions are short but demanding on the heart. Two HIIT sessions a week are enough for "
    "most runners. Testing your VO2 Max every few months shows whether the plan works. A higher "
    "VO2 Max means more oxygen reaches working muscles during exercise."
)

ARTICLE_HTML = f"""<!DOCTYPE html>
<html lang="en-GB">
<head>
  <title>{BONG_TITLE} | Glass House</title>
  <meta name="description" content="A quick guide to keeping your glass clean.">
  <meta property="og:site_name" content="Glass House">
  <meta property="og:type" content="article">
  <meta property="og:image" content="//cdn.example.com/images/bong_{{width}}x.jpg">
  <meta property="article:published_time" content="2024-03-05T10:00:00Z">
  <script type="application/ld+json">
    {{"@type": "BlogPosting", "author": {{"@type": "Person", "name": "Jamie Rivera"}}, "dateModified": "2024-03-06"}}
  </script>
  <script type="application/ld+json">{{ this is not json }}</script>
</head>
<body>
  <header>
    <img class="logo" src="/static/logo.png" alt="Glass House logo">
    <nav><a href="/">Home</a> <a href="/shop">Shop</a> <a href="/blogs/news">Blog</a></nav>
  </header>
  <article>
    <h1>How to Clean a Bong</h1>
    <p>{BONG_CONTENT}</p>
  </article>
  <footer><p>Copyright Glass House. All rights reserved.</p></footer>
</body>
</html>
"""

ARTICLE_URL = "https://glasshouse.example.com/blogs/news/how-to-clean-a-bong"

THIN_HTML = """<html><head><title>Coming soon</title></head>
<body><nav><a href="/">Home</a></nav><main><p>We are working on this page.</p></main></body></html>
"""


@pytest.fixture
def article_html():
    """A blog article page with head metadata and embedded JSON-LD"""
    return ARTICLE_HTML


@pytest.fixture
def article_url():
    return ARTICLE_URL


@pytest.fixture
def thin_html():
    """A page with almost no text"""
    return THIN_HTML


@pytest.fixture
def bong_content():
    return BONG_CONTENT


@pytest.fixture
def fitness_content():
    return FITNESS_CONTENT


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed instant"""
    instant = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return lambda: instant
