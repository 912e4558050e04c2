import sys

from werkzeug.security import generate_password_hash

from backend.app import create_app
from backend.extensions import db
from backend.models import User

password = sys.argv[1] if len(sys.argv) > 1 else 'admin123'

app = create_app()

with app.app_context():
    print(f"Targeting DB: {app.config['SQLALCHEMY_DATABASE_URI']}")
    username = app.config['SEED_ADMIN_USERNAME']

    # 1. Reset the seed admin, wherever it was renamed to
    admin = User.query.filter_by(is_seed=True).first() or User.query.filter_by(username=username).first()
    if not admin:
        print(f"Creating {username} user...")
        admin = User(username=username, role='superadmin', zone_ref=app.config['ADMIN_ZONE_REF'])
        db.session.add(admin)
    else:
        print(f"Found {admin.username} user.")

    # A reset counts as a password change, so it is always stored hashed
    admin.password = generate_password_hash(password)
    admin.password_is_hashed = True
    admin.is_seed = True
    admin.role = 'superadmin' # Ensure role
    admin.zone_ref = app.config['ADMIN_ZONE_REF']

    # 2. Print all users for verification
    print(f"Total Users: {User.query.count()}")

    db.session.commit()
    print(f"SUCCESS: Password for '{admin.username}' reset")
