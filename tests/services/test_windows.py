from datetime import date

from sowcal.schemas.plant import PlantOffsetProfile
from sowcal.schemas.schedule import DateRange
from sowcal.services.windows import compute_windows, earliest_establishment, planner_span

FROST = date(2025, 4, 15)


def test_start_indoors_offset():
    window = compute_windows(FROST, PlantOffsetProfile(slug="pepper", start_offset_days=-42))
    assert window.start_indoors == date(2025, 3, 4)


def test_offsets_cross_month_and_year_boundaries():
    window = compute_windows(date(2025, 1, 10), PlantOffsetProfile(slug="onion", start_offset_days=-70))
    assert window.start_indoors == date(2024, 11, 1)


def test_ranges_resolve_both_ends():
    window = compute_windows(
        FROST,
        PlantOffsetProfile(slug="squash", direct_sow_from=7, direct_sow_to=21, transplant_from=14, transplant_to=28),
    )
    assert window.direct_sow == DateRange(date(2025, 4, 22), date(2025, 5, 6))
    assert window.transplant == DateRange(date(2025, 4, 29), date(2025, 5, 13))


def test_harvest_uses_earliest_establishment():
    profile = PlantOffsetProfile(slug="chard", direct_sow_from=0, transplant_from=14, days_to_maturity=60)
    window = compute_windows(FROST, profile)
    assert window.harvest_estimate == date(2025, 6, 14)


def test_harvest_uses_transplant_when_it_is_earlier():
    profile = PlantOffsetProfile(slug="lettuce", direct_sow_from=10, transplant_from=-7, days_to_maturity=30)
    assert earliest_establishment(FROST, profile) == date(2025, 4, 8)
    assert compute_windows(FROST, profile).harvest_estimate == date(2025, 5, 8)


def test_no_harvest_without_an_establishment_date():
    profile = PlantOffsetProfile(slug="garlic", start_offset_days=-30, days_to_maturity=240)
    window = compute_windows(FROST, profile)
    assert window.harvest_estimate is None
    assert window.start_indoors == date(2025, 3, 16)



def test_zero_days_to_maturity_harvests_on_establishment_date():
    profile = PlantOffsetProfile(slug="microgreens", direct_sow_from=3, days_to_maturity=0)
    assert compute_windows(FROST, profile).harvest_estimate == date(2025, 4, 18)


def test_no_harvest_without_days_to_maturity():
    window = compute_windows(FROST, PlantOffsetProfile(slug="radish", direct_sow_from=-14))
    assert window.harvest_estimate is None
    assert window.direct_sow == DateRange(date(2025, 4, 1), None)


def test_empty_profile_yields_empty_window():
    window = compute_windows(FROST, PlantOffsetProfile(slug="mystery"))
    assert window.start_indoors is None
    assert window.direct_sow is None
    assert window.transplant is None
    assert window.harvest_estimate is None


def test_inverted_range_is_passed_through():
    window = compute_windows(FROST, PlantOffsetProfile(slug="odd", transplant_from=28, transplant_to=14))
    assert window.transplant.start > window.transplant.end


def test_planner_span():
    span = planner_span(FROST)
    assert span.start == date(2025, 2, 18)
    assert span.end == date(2025, 7, 8)
