from __future__ import annotations

from holitime import create_app
from holitime.database.bootstrap import DEMO_USERS
from holitime.database.extensions import db


def main() -> None:
    app = create_app({"AUTO_INIT_DB": True, "AUTO_SEED_DB": True})
    with app.app_context():
        print(f"OK: seeded database -> {db.engine.url.render_as_string(hide_password=True)}")
    for demo in DEMO_USERS:
        print(f"  {demo.role.value:<12} {demo.email} / {demo.password}")


if __name__ == "__main__":
    main()
