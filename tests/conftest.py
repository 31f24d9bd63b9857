import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from audiology.database import Base  # noqa: E402
from audiology.models.appointment import Appointment  # noqa: E402
from audiology.models.audiologist import Audiologist  # noqa: E402
from audiology.models.branch import Branch  # noqa: E402
from audiology.models.client import Client  # noqa: E402
from audiology.models.practice import Practice  # noqa: E402
from audiology.models.procedure import Procedure  # noqa: E402
from audiology.models.user import User  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def clinic(db):
    """One practice with an admin, two audiologists and nothing booked yet."""
    admin = User(email='admin@clinic.example', name='Ada Admin', role='admin')
    alice_user = User(email='alice@clinic.example', name='Alice Hart', role='audiologist')
    bob_user = User(email='bob@clinic.example', name='Bob Reed', role='audiologist')
    practice = Practice(name='Northside Hearing', address='12 High St', phone='555-0100')
    db.add_all([admin, alice_user, bob_user, practice])
    db.flush()

    alice = Audiologist(user_id=alice_user.id, practice_id=practice.id, specialization='Paediatrics')
    bob = Audiologist(user_id=bob_user.id, practice_id=practice.id, is_active=False)
    db.add_all([alice, bob])
    db.commit()

    return {'admin': admin, 'practice': practice, 'alice': alice, 'bob': bob}


@pytest.fixture
def make_appointment(db, clinic):
    def _make_appointment(**overrides) -> Appointment:
        values = {
            'patient_name': 'Pat Patient',
            'audiologist_id': clinic['alice'].id,
            'appointment_date': datetime(2026, 3, 2, 9, 0),
            'created_by': clinic['admin'].id,
        }
        values.update(overrides)
        appointment = Appointment(**values)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make_appointment


@pytest.fixture
def catalog(db, clinic):
    """Branches, clients and procedures for the clinic plus one other practice."""
    other_practice = Practice(name='Southside Hearing')
    db.add(other_practice)
    db.flush()

    practice_id = clinic['practice'].id
    db.add_all([
        Branch(name='Riverside', address='3 Mill Lane', practice_id=practice_id),
        Branch(name='Harbour', practice_id=practice_id),
        Branch(name='Southside Annex', practice_id=other_practice.id),
        Client(name='Pat Patient', email='pat@example.com', practice_id=practice_id),
        Client(name='Sam Other', practice_id=other_practice.id),
        Procedure(name='Hearing Test', description='Full audiogram', duration_minutes=45, practice_id=practice_id),
        Procedure(name='Earwax Removal', practice_id=practice_id),
    ])
    db.commit()

    return {'practice': clinic['practice'], 'other_practice': other_practice}
