"""Seed a local OpenCX database with demo data.

Creates a branch, an admin and a compliance officer, a few customers and
transactions. One transaction crosses the reporting threshold and one
customer is flagged by screening, so the compliance dashboard has alerts to
work with.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def _ensure_user(username: str, password: str, role: str, first_name: str, last_name: str, branch_id: int):
    from database import db
    from models import User, UserProfile

    user = User.query.filter_by(username=username).first()
    if user:
        return user
    user = User(username=username, email=f'{username}@opencx.local', role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    db.session.add(UserProfile(user_id=user.id, first_name=first_name, last_name=last_name, branch_id=branch_id))
    db.session.commit()
    return user


def seed(password: str) -> dict:
    from app import create_app
    from database import db
    from models import Branch, Customer, User
    from services import customers, transactions

    app = create_app()
    with app.app_context():
        branch = Branch.query.filter_by(code='HQ').first()
        if not branch:
            branch = Branch(name='Head Office', code='HQ', address='1 Main Street')
            db.session.add(branch)
            db.session.commit()

        admin = _ensure_user('admin', password, User.ROLE_ADMIN, 'Avery', 'Admin', branch.id)
        _ensure_user('compliance', password, User.ROLE_COMPLIANCE, 'Casey', 'Officer', branch.id)

        if Customer.query.count() == 0:
            regular = customers.create_customer(admin.id, first_name='Jordan', last_name='Lee',
                                                email='jordan.lee@example.com', nationality='CA')
            flagged = customers.create_customer(admin.id, first_name='Morgan', last_name='Reyes',
                                                nationality='US')
            customers.update_kyc_status(admin.id, regular, 'verified')
            customers.record_screening(admin.id, regular, 'clear')
            customers.record_screening(admin.id, flagged, 'potential_match')

            transactions.create_transaction(admin.id, 'buy', branch.id, 'USD', 'CAD', 500, 1.36,
                                            customer_id=regular, commission=5)
            transactions.create_transaction(admin.id, 'sell', branch.id, 'CAD', 'EUR', 15000, 0.68,
                                            customer_id=regular)
            transactions.create_transaction(admin.id, 'buy', branch.id, 'GBP', 'CAD', 200, 1.72,
                                            customer_id=flagged)

        return {
            'branches': Branch.query.count(),
            'users': User.query.count(),
            'customers': Customer.query.count(),
        }


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('--password', default='change-me-please', help='Password for the seeded accounts')
    args = parser.parse_args()

    counts = seed(args.password)
    print(f"Seeded {counts['branches']} branch(es), {counts['users']} user(s), {counts['customers']} customer(s).")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
