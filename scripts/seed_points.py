import os, sys
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from dayplanner.dependencies import get_database
from dayplanner.services.document_store import DocumentStoreService

store = DocumentStoreService(get_database())

TOKYO_POINTS = [
    ("Senso-ji Temple", 35.7148, 139.7967),
    ("Ueno Park", 35.7156, 139.7745),
    ("Tokyo National Museum", 35.7188, 139.7760),
    ("Tokyo Skytree", 35.7101, 139.8107),
    ("Ameyoko Market", 35.7100, 139.7745),
    ("Kappabashi Street", 35.7139, 139.7880),
]

def seed_points(uid: str):
    existing = {p.name for p in store.list_points(uid)}
    for name, lat, lng in TOKYO_POINTS:
        if name in existing:
            continue
        point = store.add_point(uid, name, lat, lng)
        print(f"Seeded point {point.id} ({name}) for user {uid}")

if __name__ == "__main__":
    seed_points(sys.argv[1] if len(sys.argv) > 1 else "demo_user")
