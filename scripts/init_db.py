from __future__ import annotations

from holitime import create_app
from holitime.database.bootstrap import list_tables
from holitime.database.extensions import db


def main() -> None:
    app = create_app({"AUTO_INIT_DB": True, "AUTO_SEED_DB": False})
    with app.app_context():
        tables = list_tables(db)
        print(f"OK: schema ready -> {db.engine.url.render_as_string(hide_password=True)} (tables={len(tables)})")


if __name__ == "__main__":
    main()
