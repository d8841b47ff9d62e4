from liferpg.core.models import DayLog
from liferpg.services.analytics import campaign_activity, category_history, week_dates


def test_category_history_accumulates_xp_per_category(catalog):
    log = [
        DayLog("2024-01-01", ["t1", "s1"]),
        DayLog("2024-01-03", ["neg_sugar"]),
    ]

    history = category_history(catalog, log, today="2024-01-03")

    assert [point["date"] for point in history] == ["2024-01-01", "2024-01-02", "2024-01-03"]
    assert history[0]["label"] == "01.01"
    assert history[0]["Physical"] == 10
    assert history[0]["Professional"] == 5
    # срывы график не опускают
    assert history[2]["Physical"] == 10
    assert history[2]["Health"] == 0


def test_category_history_empty_log(catalog):
    assert category_history(catalog, [], today="2024-01-03") == []


def test_campaign_activity_counts_projects_and_stages(catalog):
    log = [
        DayLog("2023-12-20", ["s1"]),
        DayLog("2024-01-03", ["s1", "proj_1", "t1"]),
        DayLog("2024-01-05", ["s2", "unknown"]),
    ]

    activity = campaign_activity(catalog, log, today="2024-01-05", days=3)

    assert [point["count"] for point in activity["days"]] == [2, 0, 1]
    assert activity["days"][0]["label"] == "03.01"
    assert activity["total"] == 3


def test_week_starts_on_monday():
    assert week_dates("2024-01-03") == [
        "2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04",
        "2024-01-05", "2024-01-06", "2024-01-07",
    ]
    assert week_dates("2024-01-07")[0] == "2024-01-01"
