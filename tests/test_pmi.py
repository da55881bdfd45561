from homecalc.calculators import calculate_pmi_timeline, monthly_payment


def _timeline(loan, price, dp_pct, appreciation=3, extra=0, pmi_rate=0.5):
    return calculate_pmi_timeline(
        loan,
        price,
        monthly_payment(loan, 6.5, 30),
        6.5,
        appreciation,
        dp_pct,
        extra_monthly=extra,
        pmi_rate=pmi_rate,
    )


def test_no_pmi_at_twenty_percent():
    res = _timeline(640000, 800000, 20)
    assert res.has_pmi is False
    assert res.monthly_pmi == 0
    assert res.auto_removal_month is None
    assert res.request_removal_month is None
    assert res.total_pmi_paid_until_auto == 0
    assert res.saved_by_requesting == 0
    assert res.auto_removal_year == "N/A"
    assert res.request_removal_year == "N/A"


def test_ten_percent_down():
    res = _timeline(360000, 400000, 10)
    assert res.has_pmi is True
    assert abs(res.monthly_pmi - 150) < 1e-6
    assert res.auto_removal_month > 0
    assert res.request_removal_month > 0
    assert res.request_removal_month < res.auto_removal_month
    assert res.total_pmi_paid_until_auto > 0
    expected = (res.auto_removal_month - res.request_removal_month) * res.monthly_pmi
    assert abs(res.saved_by_requesting - expected) < 1e-6
    assert float(res.auto_removal_year) > 0
    assert float(res.request_removal_year) > 0


def test_years_label_one_decimal():
    res = _timeline(360000, 400000, 10)
    for month, label in (
        (res.auto_removal_month, res.auto_removal_year),
        (res.request_removal_month, res.request_removal_year),
    ):
        whole, _, frac = label.partition(".")
        assert len(frac) == 1
        assert abs(float(label) - month / 12) <= 0.05 + 1e-9


def test_five_percent_down():
    ten = _timeline(360000, 400000, 10)
    five = _timeline(380000, 400000, 5)
    assert abs(five.monthly_pmi - 158.33) < 0.01
    assert five.auto_removal_month > ten.auto_removal_month
    assert five.request_removal_month < five.auto_removal_month


def test_appreciation_speeds_request():
    with_growth = _timeline(380000, 400000, 5, appreciation=3)
    flat = _timeline(380000, 400000, 5, appreciation=0)
    assert flat.request_removal_month is not None
    assert with_growth.request_removal_month <= flat.request_removal_month


def test_extra_payments_accelerate_removal():
    base = _timeline(360000, 400000, 10)
    extra = _timeline(360000, 400000, 10, extra=500)
    assert extra.auto_removal_month < base.auto_removal_month
    assert extra.total_pmi_paid_until_auto < base.total_pmi_paid_until_auto


def test_zero_pmi_rate_falls_back():
    res = _timeline(360000, 400000, 10, pmi_rate=0)
    assert abs(res.monthly_pmi - 150) < 1e-6
