from __future__ import annotations

import pytest

RESULTS_PAGE = """
<html><body>
  <div data-cy="search.listing-panel.label.ads-number">Znaleziono 3 ogłoszenia</div>
  <article>
    <p data-cy="listing-item-title">Słoneczne 3 pokoje przy parku</p>
    <span data-cy="listing-item-price">1&nbsp;350&nbsp;000 zł</span>
    <dl><dd data-cy="listing-item-area">75,5 m²</dd><dd>3 pokoje</dd></dl>
    <p data-cy="listing-item-address">Warszawa, Śródmieście, ul. Złota</p>
    <a data-cy="listing-item-link" href="/pl/oferta/sloneczne-3-pokoje-ID4aa1">zobacz</a>
  </article>
  <article>
    <h3>Apartament z widokiem</h3>
    <span class="css-s8lxhp">1 750 000 zł</span>
    <dl><dd>85 m²</dd></dl>
    <a href="https://www.otodom.pl/pl/oferta/apartament-ID4aa2">zobacz</a>
  </article>
  <article>
    <h3>Mieszkanie do remontu</h3>
    <span data-cy="listing-item-price">Zapytaj o cenę</span>
    <dl><dd data-cy="listing-item-area">60 m²</dd></dl>
  </article>
</body></html>
"""


@pytest.fixture
def results_page() -> str:
    return RESULTS_PAGE
