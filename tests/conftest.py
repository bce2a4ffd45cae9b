import pytest

from dayplanner.models.itinerary import Point
from dayplanner.services.day_store import initial_state


@pytest.fixture
def points():
    return [
        Point(id="pt_sensoji", name="Senso-ji Temple", lat=35.7148, lng=139.7967),
        Point(id="pt_ueno", name="Ueno Park", lat=35.7156, lng=139.7745),
        Point(id="pt_museum", name="Tokyo National Museum", lat=35.7188, lng=139.7760),
        Point(id="pt_skytree", name="Tokyo Skytree", lat=35.7101, lng=139.8107),
        Point(id="pt_ameyoko", name="Ameyoko Market", lat=35.7100, lng=139.7745),
        Point(id="pt_kappabashi", name="Kappabashi Street", lat=35.7139, lng=139.7880),
    ]


@pytest.fixture
def state():
    return initial_state(2)
