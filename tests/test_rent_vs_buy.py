from homecalc.calculators import calculate_rent_vs_buy

EQUITY = [170000, 185000, 205000, 230000, 260000, 295000, 335000, 380000, 430000, 485000]


def _compare(rent=3000, equity=EQUITY):
    return calculate_rent_vs_buy(rent, 3, 7, 160000, 5946, equity)


def test_default_rent():
    res = _compare()
    rows = res.year_data
    assert len(rows) == 10
    assert rows[0].rent == 36000
    assert rows[0].buy_cost == 71352
    assert rows[9].cumulative_rent == 412700
    assert res.total_rent_cost == 412700
    assert res.total_buy_cost == 713520
    assert rows[0].renter_wealth == 206552
    assert rows[9].renter_wealth == 739664
    assert rows[9].buyer_wealth == 485000
    assert res.break_even_year is None
    for prev, cur in zip(rows, rows[1:]):
        assert cur.renter_wealth > prev.renter_wealth
        assert cur.cumulative_rent > prev.cumulative_rent


def test_high_rent_breaks_even():
    res = _compare(rent=5000)
    assert res.year_data[0].rent == 60000
    assert res.break_even_year == 6
    assert res.total_rent_cost > _compare().total_rent_cost


def test_low_rent_never_breaks_even():
    res = _compare(rent=1500)
    assert res.year_data[0].rent == 18000
    assert res.break_even_year is None
    assert all(r.renter_wealth > r.buyer_wealth for r in res.year_data)


def test_short_equity_uses_last_value():
    res = _compare(equity=[170000, 185000])
    assert [r.buyer_wealth for r in res.year_data[2:]] == [185000] * 8


def test_missing_equity_is_zero():
    res = _compare(equity=[])
    assert all(r.buyer_wealth == 0 for r in res.year_data)
    assert res.break_even_year is None


def test_break_even_is_first_crossing():
    equity = [10 ** 7] + [0] * 9
    res = _compare(equity=equity)
    assert res.break_even_year == 1
