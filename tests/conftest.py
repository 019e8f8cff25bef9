"""
Pytest configuration and fixtures for PointBridge tests.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

sys.path.insert(0, str(PROJECT_ROOT / "python"))


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def config_dir() -> Path:
    """Return the config directory path."""
    return PROJECT_ROOT / "config"


@pytest.fixture
def fixed_clock():
    """Return a clock frozen at a known import time."""
    return lambda: datetime(2026, 2, 10, 9, 30, 0)


@pytest.fixture
def sample_records() -> list[dict]:
    """Return a batch spanning two sites."""
    return [
        {"site": "A", "date": "2026/01/01", "description": "X", "amount": 10},
        {"site": "B", "date": "2026/01/02", "service": "ICOCA", "description": "乗車", "amount": 180},
        {"site": "A", "date": "2026/01/03", "description": "Y", "amount": 20},
    ]


@pytest.fixture
def ponta_html() -> str:
    """Ponta recent-history block."""
    return """
<div class="container__recently-history">
  <ul class="point-list__list">
    <li>
      <p class="point-list__date">2月8日</p>
      <ul>
        <li class="point-list__item">
          <p class="point-list__detail">ａｕ　ＰＡＹ　カード（ご利用分 ）</p>
          <p class="point-list__point">+120P</p>
        </li>
        <li class="point-list__item">
          <p class="point-list__detail">ａｕ　ＰＡＹ　ポイント運用</p>
          <p class="point-list__point">-300P</p>
        </li>
        <li class="point-list__item">
          <p class="point-list__detail">ローソン</p>
          <p class="point-list__point">-50P</p>
        </li>
      </ul>
    </li>
    <li>
      <p class="point-list__date">1月31日</p>
      <ul>
        <li class="point-list__item">
          <p class="point-list__detail">ボーナス、キャンペーン</p>
          <p class="point-list__point">1,000P</p>
        </li>
        <li class="point-list__item">
          <p class="point-list__detail">不明</p>
          <p class="point-list__point">--</p>
        </li>
      </ul>
    </li>
  </ul>
</div>
"""


@pytest.fixture
def rakuten_html() -> str:
    """Rakuten history table with gains, pending and usage rows."""
    return """
<table class="history-table">
  <tbody>
    <tr><th>日付</th><th>サービス</th><th>内容</th><th>アクション</th><th>ポイント</th></tr>
    <tr class="get">
      <td class="date">2026<br>02/06</td>
      <td class="service">楽天市場<a class="sub-link">詳細</a></td>
      <td class="detail">楽天市場でのお買い物<div class="data"><div class="date">[2026/02/05]</div>ランクアップ対象</div></td>
      <td class="action">獲得</td>
      <td class="point">1,234</td>
    </tr>
    <tr class="get">
      <td class="date">2026<br>02/07</td>
      <td class="service">楽天カード</td>
      <td class="detail">カード利用</td>
      <td class="action">獲得予定</td>
      <td class="point">500</td>
    </tr>
    <tr class="use">
      <td class="date">2026<br>02/08</td>
      <td class="service">楽天ペイ</td>
      <td class="detail">ポイント払い</td>
      <td class="action">利用</td>
      <td class="point">300</td>
    </tr>
    <tr class="get">
      <td class="date">2026<br>02/09</td>
      <td class="service">楽天ブックス</td>
      <td class="detail">キャンペーン</td>
      <td class="action">獲得</td>
      <td class="point">50</td>
    </tr>
  </tbody>
</table>
"""


@pytest.fixture
def vpoint_html() -> str:
    """V Point history list."""
    return """
<ul>
  <li class="list__one">
    <p class="list__one__date">2025/6/27
      付与</p>
    <div>
      <p class="list__one__contents--name">ファミリーマート（Ｖポイント）</p>
      <p class="list__one__contents--point">+90</p>
    </div>
  </li>
  <li class="list__one">
    <p class="list__one__date">2025/06/26</p>
    <div>
      <p class="list__one__contents--name">ストア限定ポイント</p>
      <p class="list__one__contents--point">+20</p>
    </div>
  </li>
  <li class="list__one">
    <p class="list__one__date">2025/06/25</p>
    <div>
      <p class="list__one__contents--name">Ｖポイント運用</p>
      <p class="list__one__contents--point">-30</p>
    </div>
  </li>
  <li class="list__one">
    <p class="list__one__date">2025/06/24</p>
    <div>
      <p class="list__one__contents--name">お買い物</p>
      <p class="list__one__contents--point">-50</p>
    </div>
  </li>
  <li class="list__one">
    <p class="list__one__date">2025/06/23</p>
    <div>
      <p class="list__one__contents--name">ポイントなし</p>
    </div>
  </li>
</ul>
"""


def wester_table(date: str, place: str, content: str, points: str) -> str:
    return f"""
  <table>
    <tr><th>日付</th><th>場所</th><th>内容</th><th>ポイント</th><th>備考</th><th>内訳</th></tr>
    <tr><td>{date}</td><td>{place}</td><td>{content}</td><td>{points}</td><td></td><td></td></tr>
  </table>"""


@pytest.fixture
def wester_html() -> str:
    """WESTER point reference results."""
    tables = [
        wester_table("2026/01/10", "ICOCA", "乗車ポイント", "180 P"),
        wester_table("2026/01/11", "ICOCA", "Foo【取消】", "-50 P"),
        wester_table("2026/01/12", "ICOCA", "Foo", "-50 P"),
        wester_table("2026/01/13", "ICOCA", "Foo", "50 P"),
        wester_table("2026/01/14", "ICOCA", "壊れた行", "abc P"),
    ]
    return f'<div class="detailTableWrap">{"".join(tables)}</div>'
