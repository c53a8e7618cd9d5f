import argparse

from gymdesk.app import create_app
from gymdesk.models import db, Facility, User


def create_admin_user(facility_name, time_zone, username, password):
    """Create a facility and its first admin user if the username is free."""
    app = create_app()
    with app.app_context():
        if User.query.filter_by(username=username).first() is not None:
            print(f"User '{username}' already exists. No action taken.")
            return

        facility = Facility(name=facility_name, time_zone=time_zone)
        db.session.add(facility)
        db.session.flush()

        admin = User(
            facility_id=facility.id,
            username=username,
            first_name="Facility",
            last_name="Administrator",
            role="admin",
        )
        admin.set_password(password)
        db.session.add(admin)
        db.session.commit()
        print(f"Facility '{facility.name}' created with id {facility.id}")
        print(f"Admin user created: {username}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a facility and its admin user")
    parser.add_argument("--facility", default="Main Gym")
    parser.add_argument("--time-zone", default="America/New_York")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password", required=True)
    args = parser.parse_args()
    create_admin_user(args.facility, args.time_zone, args.username, args.password)
