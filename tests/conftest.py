import sys
from pathlib import Path

import pytest

# Ensure the repository root is importable when running tests from a checkout.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


CASH_POT_HTML = """
<html>
<head><title>Cash Pot Results</title><script>var games = ["Lotto", "Super Lotto"];</script></head>
<body>
<nav>
  <a href="/lottery/results/cash-pot">Cash Pot</a>
  <a href="/lottery/results/lotto">Lotto</a>
  <a href="/lottery/results/super-lotto">Super Lotto</a>
</nav>
<main>
  <h1>Cash Pot Results</h1>
  <div class="day">
    <p class="date">Sunday&nbsp;|&nbsp;15 February 2026</p>
    <ul>
      <li><span>EARLYBIRD</span> <span>8:30AM</span> <span>#37097</span> <b>4</b> <span>Egg</span> + <i>gold</i> + <i>red</i></li>
      <li>MORNING 10:30AM #37098 22 Dead + red + white</li>
      <li>MIDDAY 1:00PM #37099 30 Fish + white + white</li>
      <li>MIDAFTERNOON 3:00PM #37100 ? ? + ? + ?</li>
      <li>DRIVETIME 5:00PM #37101 ? ? + ? + ?</li>
      <li>EVENING 8:25PM #37102 ? ? + ? + ?</li>
    </ul>
  </div>
  <h2>Cash Pot History</h2>
  <p>Saturday | 14 February 2026</p>
  <ul><li>EVENING 8:25PM #37096 11 Corpse + red + red</li></ul>
</main>
</body>
</html>
"""

LOTTO_HTML = """
<html>
<body>
<nav>Cash Pot | Lotto | Super Lotto</nav>
<section class="result">
  <h2>Lotto Draw Result</h2>
  <p class="date">Saturday | 14 February 2026</p>
  <p class="draw">Draw #2041</p>
  <ul class="balls">
    <li>7</li><li>8</li><li>18</li><li>31</li><li>32</li><li>34</li>
  </ul>
  <span class="plus">+</span> <span class="bonus">24</span>
  <p>Next Jackpot: $39M</p>
</section>
<section>
  <h2>Lotto History</h2>
  <p>Wednesday | 11 February 2026</p>
  <ul><li>1</li><li>2</li><li>3</li><li>4</li><li>5</li><li>6</li><li>9</li></ul>
</section>
</body>
</html>
"""

SUPER_LOTTO_HTML = """
<html>
<body>
<div class="menu">Cash Pot Lotto Super Lotto</div>
<div class="title">Super   Lotto</div>
<div>Tuesday | 17 February 2026</div>
<div>3 12 19 24 33 <b>+</b> 7</div>
<div>Next Jackpot JMD 250 million</div>
<div>History</div>
<div>Friday | 13 February 2026</div><div>1 2 3 4 5 + 6</div>
</body>
</html>
"""

URLS = {
    "cash_pot": "https://www.jamaicaindex.com/lottery/results/cash-pot",
    "lotto": "https://www.jamaicaindex.com/lottery/results/lotto",
    "super_lotto": "https://www.jamaicaindex.com/lottery/results/super-lotto",
}


@pytest.fixture
def cash_pot_html():
    return CASH_POT_HTML


@pytest.fixture
def lotto_html():
    return LOTTO_HTML


@pytest.fixture
def super_lotto_html():
    return SUPER_LOTTO_HTML


@pytest.fixture
def all_pages():
    return {
        URLS["cash_pot"]: CASH_POT_HTML,
        URLS["lotto"]: LOTTO_HTML,
        URLS["super_lotto"]: SUPER_LOTTO_HTML,
    }


@pytest.fixture
def urls():
    return dict(URLS)
