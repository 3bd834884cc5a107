from access_stats.services.aggregator import Aggregator, analyze_lines
from access_stats.services.renderer import render_text
from tests.samples import SCENARIO_LINES


def test_render_scenario():
    text = render_text(analyze_lines(SCENARIO_LINES + ["junk"]))

    assert text.splitlines() == [
        "Status Codes:",
        "  200: 1",
        "  404: 1",
        "  500: 1",
        "Mean Bytes:",
        "  All Requests: 350.00",
        "  Successful Requests: 100.00",
        "  Failed Requests: 475.00",
        "Median Bytes:",
        "  All Requests: 100",
        "  Successful Requests: 100",
        "  Failed Requests: 475",
        "99th Percentile Bytes:",
        "  All Requests: 900",
        "  Successful Requests: 100",
        "  Failed Requests: 900",
        "Largest Endpoint: /x (900 bytes)",
        "Most Errors Endpoint: /y (1 errors)",
        "Parse Errors: 1 of 4 non-blank line(s)",
    ]


def test_render_empty_report():
    text = render_text(Aggregator().finalize())

    assert "Status Codes:\n  n/a" in text
    assert "  Failed Requests: n/a" in text
    assert "Largest Endpoint: n/a" in text
    assert "Most Errors Endpoint: n/a" in text
    assert text.endswith("Parse Errors: 0 of 0 non-blank line(s)")
