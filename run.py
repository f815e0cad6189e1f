from materiality import create_app, db
from materiality.models import ConsultantClient, Organization, User

app = create_app()


@app.cli.command("init-db")
def init_db():
    """Initialize the database tables."""
    db.create_all()
    print("Database initialized.")


@app.cli.command("seed-demo")
def seed_demo():
    """Create a demo organization user and a consultant with two clients."""
    if User.query.filter_by(email="owner@example.com").first():
        print("Demo data already present.")
        return

    owner = User(email="owner@example.com", full_name="Organization Owner", role="organization")
    consultant = User(email="consultant@example.com", full_name="ESG Consultant", role="consultant")
    db.session.add_all([owner, consultant])
    db.session.flush()

    own_org = Organization(name="Acme Manufacturing", industry="Manufacturing", owner_id=owner.id)
    client_org = Organization(name="Northwind Logistics", industry="Transport")
    db.session.add_all([own_org, client_org])
    db.session.flush()

    db.session.add_all([
        ConsultantClient(consultant_id=consultant.id, organization_id=own_org.id),
        ConsultantClient(consultant_id=consultant.id, organization_id=client_org.id),
    ])
    db.session.commit()
    print(f"Demo data created. Organization user id={owner.id}, consultant id={consultant.id}")


if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=5000)
