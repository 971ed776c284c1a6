"""
Database seeding for OOH Ops.
Creates the default company and an admin user if the database is empty.
"""

import logging
from database.connection import get_db_session
from database.models import Company, User

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@ohplus.ph"


def seed_default_company(session, config):
    """Create the default company from configuration if none exists."""
    company = session.query(Company).first()
    if company:
        logger.info(f"Company already exists: {company.name}")
        return company

    company = Company(
        name=config.get('COMPANY_NAME', 'OH Plus'),
        address=config.get('COMPANY_ADDRESS'),
        phone=config.get('COMPANY_PHONE'),
        email=config.get('COMPANY_EMAIL'),
        settings={
            'currency': config.get('CURRENCY', 'PHP'),
            'vat_rate': config.get('VAT_RATE', 0.12),
        }
    )
    session.add(company)
    session.flush()
    logger.info(f"Created default company: {company.name}")
    return company


def seed_default_admin(session, company_id):
    """Create default admin user if none exists."""
    admin = session.query(User).filter_by(role='admin').first()
    if admin:
        logger.info(f"Admin user already exists: {admin.email}")
        return admin

    admin = User(
        company_id=company_id,
        email=DEFAULT_ADMIN_EMAIL,
        first_name="System",
        last_name="Administrator",
        position="Administrator",
        role='admin',
        is_active=True
    )
    session.add(admin)
    session.flush()
    logger.info(f"Created default admin user: {admin.email}")
    return admin


def seed_database(config):
    """
    Seed the database with default data if empty.
    Called at application startup outside of tests.
    """
    try:
        with get_db_session() as session:
            company = seed_default_company(session, config)
            seed_default_admin(session, company.id)
        logger.info("Database seeding completed successfully")
        return True
    except Exception as e:
        logger.error(f"Database seeding failed: {e}")
        raise
