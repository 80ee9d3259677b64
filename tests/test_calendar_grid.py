from datetime import date

from lupon_client.calendar_grid import GRID_SIZE, build_month_grid, is_selectable, is_weekend


def test_every_month_has_42_cells_starting_on_sunday():
    today = date(2025, 1, 15)
    for year in (2024, 2025, 2026):
        for month in range(1, 13):
            grid = build_month_grid(date(year, month, 20), today=today)
            assert len(grid.cells) == GRID_SIZE
            assert grid.cells[0].date.weekday() == 6
            first_index = grid.first_of_month_index
            assert 0 <= first_index <= 6
            assert grid.cells[first_index].date == date(year, month, 1)


def test_month_starting_on_sunday_has_no_leading_days():
    grid = build_month_grid(date(2025, 6, 10), today=date(2025, 6, 1))
    assert grid.first_of_month_index == 0
    assert grid.cells[0].date == date(2025, 6, 1)
    assert grid.cells[-1].date == date(2025, 7, 12)


def test_month_starting_on_saturday_leads_with_previous_month():
    grid = build_month_grid(date(2025, 3, 1), today=date(2025, 3, 12))
    assert grid.first_of_month_index == 6
    assert grid.cells[0].date == date(2025, 2, 23)
    assert not grid.cells[0].is_current_month
    assert not grid.cells[0].is_available


def test_flags_for_today_past_and_weekend():
    grid = build_month_grid(date(2025, 3, 1), today=date(2025, 3, 12), selected="2025-03-14")

    yesterday = grid.cell_for(date(2025, 3, 11))
    today = grid.cell_for(date(2025, 3, 12))
    saturday = grid.cell_for(date(2025, 3, 15))
    friday = grid.cell_for(date(2025, 3, 14))

    assert yesterday.is_past and not yesterday.is_available
    assert today.is_today and not today.is_past and today.is_available
    assert saturday.is_weekend and not saturday.is_available
    assert friday.is_selected and friday.is_available
    assert sum(cell.is_selected for cell in grid.cells) == 1


def test_available_dates_are_future_weekdays_of_the_month():
    grid = build_month_grid(date(2025, 3, 1), today=date(2025, 3, 25))
    assert grid.available_dates() == [
        date(2025, 3, 25),
        date(2025, 3, 26),
        date(2025, 3, 27),
        date(2025, 3, 28),
        date(2025, 3, 31),
    ]


def test_whole_month_in_the_past_has_nothing_available():
    grid = build_month_grid(date(2024, 11, 1), today=date(2025, 3, 12))
    assert grid.available_dates() == []


def test_weeks_and_navigation():
    grid = build_month_grid(date(2025, 12, 5), today=date(2025, 12, 1))
    assert len(grid.weeks) == 6
    assert all(len(week) == 7 for week in grid.weeks)
    assert grid.next_month() == date(2026, 1, 1)
    assert grid.previous_month() == date(2025, 11, 1)

    january = build_month_grid(date(2026, 1, 1), today=date(2025, 12, 1))
    assert january.previous_month() == date(2025, 12, 1)


def test_date_string_matches_selected_binding():
    grid = build_month_grid(date(2025, 7, 1), today=date(2025, 7, 1), selected="2025-07-04")
    selected = [cell for cell in grid.cells if cell.is_selected]
    assert [cell.date_string for cell in selected] == ["2025-07-04"]


def test_today_defaults_to_local_date():
    grid = build_month_grid(date(2025, 7, 1))
    assert sum(cell.is_today for cell in grid.cells) <= 1
    assert len(grid.cells) == GRID_SIZE


def test_selectable_days_are_weekdays_from_today():
    today = date(2025, 7, 14)
    assert is_selectable(date(2025, 7, 14), today)
    assert is_selectable(date(2025, 7, 18), today)
    assert not is_selectable(date(2025, 7, 11), today)
    assert not is_selectable(date(2025, 7, 19), today)
    assert is_weekend(date(2025, 7, 20))
