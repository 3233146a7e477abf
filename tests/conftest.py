"""
PokéSweep — Shared pytest Fixtures

Synthetic pop-report pages covering each selection path:
- structural_html:  three `.card` blocks inside a `.card-grid` wrapper
- fallback_html:    no card classes at all, only "Total Population" text
- broad_sweep_html: unclassed tiles mixed with page furniture
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from pokesweep.scraper import PageSnapshot


STRUCTURAL_HTML = """
<html>
  <head><title>Base Set Pop Report</title><script>var pop = "PSA 10 999 1/1";</script></head>
  <body>
    <header><nav>Home Pop Report</nav></header>
    <main>
      <div class="card-grid">
        <div class="card">
          <h3>Charizard</h3>
          <p>Holo Rare 4/102</p>
          <div class="pops">Total Population 18,361 PSA 10 121 PSA 9 1,204 PSA 8 3,310</div>
        </div>
        <div class="card">
          <span class="num">2/102</span>
          <p>Holo Rare</p>
          <div class="pops">Population 9,000 PSA 10 88 PSA 9 700</div>
        </div>
        <div class="card">
          <h3>Chansey</h3>
          <p>Holo Rare 3/102</p>
          <div class="pops">PSA 10 50 PSA 9 400</div>
        </div>
      </div>
    </main>
  </body>
</html>
"""

FALLBACK_HTML = """
<html>
  <body>
    <div id="list">
      <section>
        <h2>Pikachu</h2>
        <small>Common 58/102</small>
        <span>Total Population 5,000</span>
        <span>PSA 10 1,000</span>
      </section>
      <section>
        <h2>Raichu</h2>
        <small>Holo Rare 14/102</small>
        <span>Total Population 2,000</span>
      </section>
      <section><h2>About</h2>Contact us</section>
    </div>
  </body>
</html>
"""

BROAD_SWEEP_HTML = """
<html>
  <body>
    <div class="page">
      <div class="banner">Grading tips: PSA 10 is gem mint. Updated 1/2</div>
      <div class="tile">
        <div class="tile-head"><h2>Charizard</h2><p>Holo Rare 4/102</p></div>
        <div class="tile-pops">PSA 10 121 PSA 9 1,204 PSA 8 3,310 Total Population 18,361</div>
      </div>
      <div class="tile">
        <div class="tile-head"><h2>Blastoise</h2><p>Holo Rare 2/102</p></div>
        <div class="tile-pops">PSA 10 300 PSA 9 2,000 PSA 8 4,000 PSA 7 1,000 Population 9,800 extra text</div>
      </div>
      <div class="tile">
        <div class="tile-head"><h2>Venusaur</h2><p>Holo Rare 15/102</p></div>
        <div class="tile-pops">PSA 10 90 PSA 9 800</div>
      </div>
      <div class="tile"><h2>Mystery</h2><div>PSA 10 5 PSA 9 6 PSA 8 7</div></div>
    </div>
  </body>
</html>
"""

EMPTY_HTML = "<html><body><p>Nothing to see here.</p></body></html>"

PROMO_HTML = """
<html>
  <body>
    <div class="card-grid">
      <div class="card">
        <h3>Pikachu</h3>
        <p>Promo SWSH001</p>
        <div>Total Population 5,000</div>
      </div>
      <div class="card">
        <h3>Eevee</h3>
        <p>Promo SWSH002</p>
        <div>Total Population 3,000</div>
      </div>
      <div class="card">
        <h3>Snorlax</h3>
        <p>Promo SWSH003</p>
        <div>Total Population 1,000</div>
      </div>
    </div>
  </body>
</html>
"""

UNNUMBERED_FALLBACK_HTML = """
<html>
  <body>
    <div id="list">
      <section><h2>Pikachu</h2><span>Total Population 5,000</span></section>
      <section><h2>Raichu</h2><span>Total Population 2,000</span></section>
    </div>
  </body>
</html>
"""


@pytest.fixture
def structural_html() -> str:
    return STRUCTURAL_HTML


@pytest.fixture
def fallback_html() -> str:
    return FALLBACK_HTML


@pytest.fixture
def broad_sweep_html() -> str:
    return BROAD_SWEEP_HTML


@pytest.fixture
def empty_html() -> str:
    return EMPTY_HTML


@pytest.fixture
def promo_html() -> str:
    return PROMO_HTML


@pytest.fixture
def unnumbered_fallback_html() -> str:
    return UNNUMBERED_FALLBACK_HTML


@pytest.fixture
def make_snapshot():
    """Factory for PageSnapshot objects."""

    def _make(
        html: str,
        url: str = "https://www.pikawiz.com/cards/pop-report/baseset",
        method: str = "browser",
        status_code: int | None = 200,
    ) -> PageSnapshot:
        return PageSnapshot(
            url=url,
            html=html,
            status_code=status_code,
            acquisition_method=method,
            fetched_at=datetime.now(timezone.utc),
        )

    return _make
