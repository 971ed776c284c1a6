"""
Pytest configuration and shared fixtures
"""
import os
import sys
import pytest
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ.setdefault('FLASK_ENV', 'testing')


@pytest.fixture
def app(tmp_path):
    """Flask app on a fresh in-memory database with local file storage"""
    from app_init import create_app

    app = create_app('testing', overrides={
        'OUTPUT_FOLDER': str(tmp_path / 'outputs'),
        'SECRET_KEY': 'test-secret-key-minimum-32-chars-long-for-security',
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db_session(app):
    """Session bound to the test database; committed by the test when needed"""
    from database.connection import get_session_factory

    session = get_session_factory()()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def company(app):
    """A company with one sales user"""
    from database.connection import get_db_session
    from database.models import Company, User

    with get_db_session() as session:
        company = Company(
            name='Test Outdoor Media',
            address='1 Test Avenue, Makati',
            phone='(02) 1234 5678',
            email='sales@testoutdoor.ph'
        )
        session.add(company)
        session.flush()
        user = User(
            company_id=company.id,
            email='agent@testoutdoor.ph',
            first_name='Ana',
            last_name='Reyes',
            position='Account Manager',
            role='sales'
        )
        session.add(user)
        session.flush()
        ids = {'company_id': company.id, 'user_id': user.id}

    return ids


@pytest.fixture
def headers(company):
    """Tenant headers for API requests"""
    return {
        'X-Company-Id': company['company_id'],
        'X-User-Id': company['user_id'],
    }


@pytest.fixture
def sample_site():
    """A static billboard site as sent by the site picker"""
    return {
        'id': 'site-edsa-1',
        'name': 'EDSA Guadalupe',
        'location': 'EDSA Guadalupe, Makati',
        'price': 150000,
        'type': 'Static',
        'content_type': 'static',
        'image': None,
    }


@pytest.fixture
def sample_client():
    return {
        'id': 'client-1',
        'name': 'Maria Santos',
        'company': 'Acme Beverages',
        'email': 'maria@acme.ph',
        'contactPerson': 'Maria Santos',
        'designation': 'Marketing Head',
        'phone': '+639171234567',
    }


@pytest.fixture
def two_site_line_items():
    """Line items for two sites plus one row that belongs to neither"""
    return [
        {'id': 'site-a', 'description': 'EDSA Guadalupe', 'quantity': 1, 'unitPrice': 100000,
         'total': 300000, 'category': 'Static Billboard Rental'},
        {'id': 'site-a-production', 'description': 'Production - EDSA Guadalupe', 'quantity': 1,
         'unitPrice': 0, 'total': 0, 'category': 'Production'},
        {'id': 'site-b', 'description': 'C5 Libis', 'quantity': 1, 'unitPrice': 80000,
         'total': 240000, 'category': 'LED Billboard Rental'},
        {'id': 'site-b-installation', 'description': 'Installation - C5 Libis', 'quantity': 1,
         'unitPrice': 0, 'total': 0, 'category': 'Installation'},
        {'id': 'misc-1', 'description': 'Permit fees', 'quantity': 1,
         'unitPrice': 5000, 'total': 5000, 'category': 'Other'},
    ]


@pytest.fixture
def fake_image_loader():
    """Image loader that never touches the network"""
    from documents.images import placeholder_image

    calls = []

    def loader(url):
        calls.append(url)
        return placeholder_image()

    loader.calls = calls
    return loader
