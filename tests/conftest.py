"""Shared fixtures for the test suite."""
import pytest

from kairat_notify.models import AvailabilityStatus, Snapshot

PAGE_URL = "https://fckairat.com/match"


def match_block(opponent: str, href: str = "/tickets/1", disabled: bool = False, button: bool = True) -> str:
    """HTML of one match block as it appears on the match page."""
    classes = "match-block__tickets skew simple-filled-btn"
    if disabled:
        classes += " disabled"
    href_attr = f' href="{href}"' if href is not None else ""
    button_html = f'<a class="{classes}"{href_attr}>Купить билет</a>' if button else ""
    return (
        '<div class="match-block">'
        '<div class="match-block__team"><span class="match-block__name"> Кайрат </span></div>'
        f'<div class="match-block__team"><span class="match-block__name">\n  {opponent}\n</span></div>'
        f"{button_html}"
        "</div>"
    )


def match_page(*blocks: str) -> str:
    return f"<html><body><main>{''.join(blocks)}</main></body></html>"


def make_snapshot(aktobe=(False, ""), real_madrid=(False, "")) -> Snapshot:
    return Snapshot({
        "aktobe": AvailabilityStatus(*aktobe),
        "realMadrid": AvailabilityStatus(*real_madrid),
    })


@pytest.fixture
def page_url():
    return PAGE_URL
