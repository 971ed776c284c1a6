"""
Tests for the tenant-scoped repositories
"""
import pytest

from database.models import ActivityLog
from services import (
    BookingRepository,
    ClientRepository,
    CostEstimateRepository,
    JobOrderRepository,
    NotFoundError,
    ProductRepository,
    ProposalRepository,
    QuotationRepository,
    ReportRepository,
    TeamRepository,
)
from services.cost_estimate_repository import contract_duration_days
from services.proposal_repository import CLIENT_FIELDS
from services.quotation_repository import calculate_quotation_total
from services.report_repository import clean_attachments


class RecordingIndexer:
    """Collects index writes instead of calling the search service"""

    def __init__(self):
        self.saved = []
        self.deleted = []

    def save_object(self, index, record):
        self.saved.append((index, record['id']))
        return True

    def delete_object(self, index, object_id):
        self.deleted.append((index, object_id))
        return True


@pytest.fixture
def indexer():
    return RecordingIndexer()


@pytest.fixture
def make_repo(db_session, company, indexer):
    def make(repo_class, company_id=None):
        return repo_class(db_session, company_id or company['company_id'],
                          company['user_id'], indexer=indexer)
    return make


def site(site_id, name, price=100000, site_type='Static'):
    return {'id': site_id, 'name': name, 'location': f"{name}, Metro Manila",
            'price': price, 'type': site_type}


@pytest.mark.integration
class TestCostEstimateRepository:

    def test_contract_duration_is_inclusive(self):
        assert contract_duration_days('2024-02-01', '2024-03-01') == 30
        assert contract_duration_days('2024-02-01', '2024-02-01') == 1
        assert contract_duration_days(None, '2024-02-01') == 30

    def test_create_direct_builds_site_rows(self, make_repo, sample_site, sample_client):
        repo = make_repo(CostEstimateRepository)
        estimate = repo.create_direct(sample_client, [sample_site],
                                      start_date='2024-02-01', end_date='2024-03-01')

        assert estimate['cost_estimate_number'].startswith('CE-')
        assert estimate['status'] == 'draft'
        assert len(estimate['password']) == 8
        assert estimate['duration_days'] == 30
        assert [item['id'] for item in estimate['line_items']] == [
            'site-edsa-1', 'site-edsa-1-production', 'site-edsa-1-installation',
            'site-edsa-1-maintenance'
        ]
        assert estimate['line_items'][0]['category'] == 'Static Billboard Rental'
        assert estimate['subtotal'] == pytest.approx(150000)
        assert estimate['total_amount'] == pytest.approx(168000)
        assert estimate['title'] == 'Cost Estimate for EDSA Guadalupe'

    def test_led_site_gets_led_category(self, make_repo, sample_client):
        repo = make_repo(CostEstimateRepository)
        estimate = repo.create_direct(sample_client, [site('led-1', 'C5 Libis', site_type='LED')])
        assert estimate['line_items'][0]['category'] == 'LED Billboard Rental'

    def test_custom_rental_rows_repriced_for_duration(self, make_repo, sample_client):
        repo = make_repo(CostEstimateRepository)
        items = [
            {'id': 'r1', 'description': 'EDSA', 'quantity': 1, 'unitPrice': 100000,
             'total': 1, 'category': 'Static Billboard Rental'},
            {'id': 'p1', 'description': 'Printing', 'quantity': 1, 'unitPrice': 5000,
             'total': 5000, 'category': 'Production'},
        ]
        estimate = repo.create_direct(sample_client, [], start_date='2024-01-01',
                                      end_date='2024-03-30', custom_line_items=items)
        assert estimate['duration_days'] == 90
        assert estimate['line_items'][0]['total'] == pytest.approx(300000)
        assert estimate['subtotal'] == pytest.approx(305000)

    def test_create_multiple_shares_page_id(self, make_repo, sample_client):
        repo = make_repo(CostEstimateRepository)
        created = repo.create_multiple(sample_client, [site('a', 'EDSA'), site('b', 'C5'),
                                                       site('c', 'SLEX')])
        page_ids = {e['page_id'] for e in created}
        assert len(page_ids) == 1
        assert page_ids.pop().startswith('PAGE-')
        assert [e['page_number'] for e in created] == [1, 2, 3]
        assert [e['title'] for e in created] == [
            'Cost Estimate for EDSA', 'Cost Estimate for C5', 'Cost Estimate for SLEX'
        ]

    def test_create_multiple_single_site_has_no_page(self, make_repo, sample_client):
        created = make_repo(CostEstimateRepository).create_multiple(sample_client, [site('a', 'EDSA')])
        assert created[0]['page_id'] is None
        assert created[0]['page_number'] is None

    def test_list_grouped_and_by_page(self, make_repo, sample_client, sample_site):
        repo = make_repo(CostEstimateRepository)
        siblings = repo.create_multiple(sample_client, [site('a', 'EDSA'), site('b', 'C5')])
        single = repo.create_direct(sample_client, [sample_site])

        groups = repo.list_grouped()
        by_key = {g['page_id']: g for g in groups}
        assert by_key[siblings[0]['page_id']]['count'] == 2
        assert by_key[single['id']]['count'] == 1

        page = repo.list_by_page(siblings[0]['page_id'])
        assert [e['page_number'] for e in page] == [1, 2]

    def test_create_from_proposal_default_rows(self, make_repo):
        repo = make_repo(CostEstimateRepository)
        proposal = {
            'id': 'prop-1',
            'title': 'Q1 Campaign',
            'client': {'id': 'client-1', 'company': 'Acme'},
            'products': [{'name': 'EDSA', 'location': 'Makati', 'price': 100000},
                         {'name': 'C5', 'location': 'QC', 'price': 50000}],
        }
        estimate = repo.create_from_proposal(proposal)
        assert [item['id'] for item in estimate['line_items']] == [
            'item_1', 'item_2', 'item_3', 'item_4', 'item_5'
        ]
        assert estimate['line_items'][0]['description'] == 'EDSA - Makati'
        assert estimate['subtotal'] == pytest.approx(150000)
        assert estimate['proposal_id'] == 'prop-1'
        assert estimate['title'] == 'Cost Estimate for Q1 Campaign'
        assert repo.list_by_proposal('prop-1')[0]['id'] == estimate['id']

    def test_create_from_proposal_sent_when_emailed(self, make_repo):
        estimate = make_repo(CostEstimateRepository).create_from_proposal(
            {'id': 'p', 'title': 'T', 'products': []}, send_email=True)
        assert estimate['status'] == 'sent'

    def test_update_line_items_recalculates(self, make_repo, sample_client, sample_site):
        repo = make_repo(CostEstimateRepository)
        estimate = repo.create_direct(sample_client, [sample_site])
        updated = repo.update(estimate['id'], {'line_items': [
            {'id': 'x', 'description': 'Flat', 'quantity': 1, 'unitPrice': 1000, 'total': 1000,
             'category': 'other'}
        ]})
        assert updated['subtotal'] == pytest.approx(1000)
        assert updated['total_amount'] == pytest.approx(1120)

    def test_update_missing_returns_none(self, make_repo):
        assert make_repo(CostEstimateRepository).update('nope', {'title': 'x'}) is None

    def test_approval_records_actor(self, make_repo, company, sample_client, sample_site):
        repo = make_repo(CostEstimateRepository)
        estimate = repo.create_direct(sample_client, [sample_site])
        approved = repo.update_status(estimate['id'], 'approved')
        assert approved['status'] == 'approved'
        assert approved['approved_by'] == company['user_id']
        assert approved['approved_at'] is not None

    def test_rejection_records_reason(self, make_repo, sample_client, sample_site):
        repo = make_repo(CostEstimateRepository)
        estimate = repo.create_direct(sample_client, [sample_site])
        rejected = repo.update_status(estimate['id'], 'rejected', rejection_reason='Too high')
        assert rejected['rejection_reason'] == 'Too high'
        assert rejected['rejected_at'] is not None

    def test_invalid_status_raises(self, make_repo, sample_client, sample_site):
        repo = make_repo(CostEstimateRepository)
        estimate = repo.create_direct(sample_client, [sample_site])
        with pytest.raises(ValueError):
            repo.update_status(estimate['id'], 'paid')

    def test_status_of_missing_estimate(self, make_repo):
        with pytest.raises(NotFoundError):
            make_repo(CostEstimateRepository).update_status('nope', 'sent')

    def test_writes_are_logged_and_indexed(self, make_repo, db_session, indexer,
                                           sample_client, sample_site):
        repo = make_repo(CostEstimateRepository)
        estimate = repo.create_direct(sample_client, [sample_site])
        repo.delete(estimate['id'])
        db_session.flush()

        events = db_session.query(ActivityLog).filter(
            ActivityLog.entity_id == estimate['id']).all()
        assert {e.event_type for e in events} == {'CREATED', 'DELETED'}
        assert ('cost_estimates', estimate['id']) in indexer.saved
        assert indexer.deleted == [('cost_estimates', estimate['id'])]
        assert repo.get(estimate['id']) is None

    def test_other_company_cannot_see_estimate(self, make_repo, sample_client, sample_site):
        estimate = make_repo(CostEstimateRepository).create_direct(sample_client, [sample_site])
        other = make_repo(CostEstimateRepository, company_id='another-company')
        assert other.get(estimate['id']) is None
        assert other.list_paginated()['total'] == 0


@pytest.mark.integration
class TestQuotationRepository:

    def test_calculate_total_uses_daily_rate(self):
        result = calculate_quotation_total('2024-01-01', '2024-01-31', [{'id': 'a', 'price': 90000}])
        assert result['duration_days'] == 30
        assert result['total_amount'] == pytest.approx(90000)
        assert result['items'][0]['item_total_amount'] == pytest.approx(90000)
        assert result['items'][0]['duration_days'] == 30

    def test_calculate_total_minimum_one_day(self):
        result = calculate_quotation_total('2024-01-01', '2024-01-01', [{'price': 90000}])
        assert result['duration_days'] == 1
        assert result['total_amount'] == pytest.approx(3000)

    def test_calculate_total_rounds_partial_days_up(self):
        result = calculate_quotation_total('2024-01-01T00:00:00', '2024-01-02T06:00:00',
                                           [{'price': 30}])
        assert result['duration_days'] == 2

    def test_create_prices_items(self, make_repo, company):
        quotation = make_repo(QuotationRepository).create({
            'client_name': 'Maria Santos',
            'start_date': '2024-01-01',
            'end_date': '2024-03-01',
            'items': [{'id': 'site-a', 'name': 'EDSA', 'price': 30000}],
        })
        assert quotation['quotation_number'].startswith('QT-')
        assert quotation['duration_days'] == 60
        assert quotation['total_amount'] == pytest.approx(60000)
        assert quotation['seller_id'] == company['user_id']
        assert quotation['status'] == 'draft'
        assert quotation['valid_until'] is not None

    def test_create_multiple_one_per_item(self, make_repo):
        created = make_repo(QuotationRepository).create_multiple({
            'start_date': '2024-01-01',
            'end_date': '2024-01-31',
            'items': [{'id': 'a', 'price': 30000}, {'id': 'b', 'price': 60000}],
        })
        assert len(created) == 2
        assert created[0]['page_id'] == created[1]['page_id']
        assert [q['page_number'] for q in created] == [1, 2]
        assert [len(q['items']) for q in created] == [1, 1]

    def test_get_enriches_items_from_product(self, make_repo):
        product = make_repo(ProductRepository).create({
            'name': 'EDSA Guadalupe', 'price': 120000,
            'media': [{'url': 'https://cdn.example.com/edsa.jpg'}],
            'specs_rental': {'height': 40, 'width': 60},
        })
        repo = make_repo(QuotationRepository)
        quotation = repo.create({'items': [{'id': product['id'], 'price': 100000}]})

        item = repo.get(quotation['id'])['items'][0]
        assert item['name'] == 'EDSA Guadalupe'
        assert item['price'] == 100000
        assert item['media_url'] == 'https://cdn.example.com/edsa.jpg'
        assert item['specs_rental'] == {'height': 40, 'width': 60}

    def test_get_or_raise(self, make_repo):
        with pytest.raises(NotFoundError):
            make_repo(QuotationRepository).get_or_raise('missing')

    def test_update_dates_reprices(self, make_repo):
        repo = make_repo(QuotationRepository)
        quotation = repo.create({'start_date': '2024-01-01', 'end_date': '2024-01-31',
                                 'items': [{'id': 'a', 'price': 30000}]})
        updated = repo.update(quotation['id'], {'end_date': '2024-03-01'})
        assert updated['duration_days'] == 60
        assert updated['total_amount'] == pytest.approx(60000)

    def test_update_status(self, make_repo):
        repo = make_repo(QuotationRepository)
        quotation = repo.create({'items': []})
        assert repo.update_status(quotation['id'], 'accepted')['status'] == 'accepted'
        with pytest.raises(ValueError):
            repo.update_status(quotation['id'], 'approved')


@pytest.mark.integration
class TestJobOrderAndBookingRepositories:

    @pytest.fixture
    def quotation(self, make_repo):
        return make_repo(QuotationRepository).create({
            'client_name': 'Maria Santos',
            'client_company_name': 'Acme Beverages',
            'start_date': '2024-01-01',
            'end_date': '2024-01-31',
            'items': [{'id': 'site-a', 'name': 'EDSA', 'location': 'Makati', 'price': 90000}],
        })

    def test_job_order_from_quotation(self, make_repo, quotation):
        job_order = make_repo(JobOrderRepository).create_from_quotation(quotation, notes='Rush')
        assert job_order['job_order_number'].startswith('JO-')
        assert job_order['status'] == 'pending'
        assert job_order['product_id'] == 'site-a'
        assert job_order['client_company'] == 'Acme Beverages'
        assert job_order['quotation_number'] == quotation['quotation_number']

    def test_assign_moves_to_in_progress(self, make_repo, quotation):
        repo = make_repo(JobOrderRepository)
        job_order = repo.create_from_quotation(quotation)
        assigned = repo.assign(job_order['id'], 'crew-1', 'Team Alpha')
        assert assigned['status'] == 'in_progress'
        assert assigned['assigned_name'] == 'Team Alpha'

    def test_job_order_status_validation(self, make_repo, quotation):
        repo = make_repo(JobOrderRepository)
        job_order = repo.create_from_quotation(quotation)
        assert repo.update_status(job_order['id'], 'completed')['status'] == 'completed'
        with pytest.raises(ValueError):
            repo.update_status(job_order['id'], 'done')

    def test_list_by_creator(self, make_repo, company, quotation):
        repo = make_repo(JobOrderRepository)
        repo.create_from_quotation(quotation)
        assert len(repo.list_by_creator(company['user_id'])) == 1
        assert repo.list_by_creator('someone-else') == []

    def test_booking_from_quotation(self, make_repo, quotation):
        booking = make_repo(BookingRepository).create_from_quotation(quotation)
        assert booking['status'] == 'RESERVED'
        assert booking['product_id'] == 'site-a'
        assert booking['total_cost'] == pytest.approx(90000)

    def test_booking_requires_a_site(self, make_repo):
        with pytest.raises(ValueError):
            make_repo(BookingRepository).create_from_quotation({'id': 'q', 'items': []})

    def test_completed_count(self, make_repo, quotation):
        repo = make_repo(BookingRepository)
        first = repo.create_from_quotation(quotation)
        repo.create_from_quotation(quotation)
        repo.update_status(first['id'], 'COMPLETED')
        assert repo.completed_count() == 1
        assert repo.count() == 2
        assert len(repo.list_by_product('site-a')) == 2


@pytest.mark.integration
class TestCatalogRepositories:

    def test_product_soft_delete(self, make_repo, indexer):
        repo = make_repo(ProductRepository)
        product = repo.create({'name': 'EDSA Guadalupe', 'content_type': 'Dynamic'})
        assert product['content_type'] == 'dynamic'

        assert repo.delete(product['id']) is True
        assert repo.get(product['id']) is None
        assert repo.list_paginated()['total'] == 0
        assert ('products', product['id']) in indexer.deleted

    def test_product_filters(self, make_repo):
        repo = make_repo(ProductRepository)
        repo.create({'name': 'EDSA Guadalupe', 'content_type': 'static', 'location': 'Makati'})
        repo.create({'name': 'C5 Libis', 'content_type': 'dynamic', 'location': 'Quezon City'})
        assert repo.list_paginated(content_type='Dynamic')['total'] == 1
        assert repo.list_paginated(search='makati')['items'][0]['name'] == 'EDSA Guadalupe'

    def test_pagination_has_more(self, make_repo):
        repo = make_repo(ProductRepository)
        for n in range(25):
            repo.create({'name': f"Site {n:02d}"})

        first = repo.list_paginated(page=1, per_page=10)
        last = repo.list_paginated(page=3, per_page=10)
        assert first['pages'] == 3
        assert first['has_more'] is True
        assert len(last['items']) == 5
        assert last['has_more'] is False

    def test_client_email_lookup_is_case_insensitive(self, make_repo):
        repo = make_repo(ClientRepository)
        client = repo.create({'name': 'Maria Santos', 'email': ' Maria@Acme.PH '})
        assert client['email'] == 'maria@acme.ph'
        assert client['status'] == 'lead'
        assert repo.get_by_email('MARIA@acme.ph')['id'] == client['id']

    def test_client_soft_delete(self, make_repo):
        repo = make_repo(ClientRepository)
        client = repo.create({'name': 'Maria Santos', 'email': 'maria@acme.ph'})
        repo.delete(client['id'])
        assert repo.get_by_email('maria@acme.ph') is None

    def test_team_members(self, make_repo):
        repo = make_repo(TeamRepository)
        team = repo.create({'name': 'Alpha'})
        repo.add_member(team['id'], {'id': 'u1', 'name': 'Jun'})
        team = repo.add_member(team['id'], {'id': 'u1', 'name': 'Jun'})
        assert len(team['members']) == 1

        team = repo.remove_member(team['id'], 'u1')
        assert team['members'] == []

    def test_team_active_filter(self, make_repo):
        repo = make_repo(TeamRepository)
        repo.create({'name': 'Alpha'})
        repo.create({'name': 'Bravo', 'status': 'inactive'})
        assert [t['name'] for t in repo.list(active_only=True)] == ['Alpha']
        assert len(repo.list()) == 2

    def test_team_member_of_missing_team(self, make_repo):
        with pytest.raises(NotFoundError):
            make_repo(TeamRepository).add_member('missing', {'id': 'u1'})


@pytest.mark.integration
class TestProposalRepository:

    def test_create_totals_and_cleans(self, make_repo):
        proposal = make_repo(ProposalRepository).create({
            'title': 'Q1 Campaign',
            'client': {'company': 'Acme'},
            'products': [{'id': 'a', 'name': 'EDSA', 'price': '100000'},
                         {'id': 'b', 'name': 'C5', 'price': 'n/a'}],
        })
        assert proposal['proposal_number'].startswith('PP-')
        assert proposal['total_amount'] == pytest.approx(100000)
        assert set(CLIENT_FIELDS) <= set(proposal['client'])
        assert proposal['products'][1]['price'] == 0.0
        assert proposal['status'] == 'draft'

    def test_update_products_recomputes_total(self, make_repo):
        repo = make_repo(ProposalRepository)
        proposal = repo.create({'title': 'T', 'products': [{'id': 'a', 'price': 10}]})
        updated = repo.update(proposal['id'], {'products': [{'id': 'a', 'price': 10},
                                                            {'id': 'b', 'price': 15}]})
        assert updated['total_amount'] == pytest.approx(25)

    def test_count_by_status(self, make_repo):
        repo = make_repo(ProposalRepository)
        first = repo.create({'title': 'A', 'products': []})
        repo.create({'title': 'B', 'products': []})
        repo.update_status(first['id'], 'sent')
        assert repo.count() == 2
        assert repo.count(status='sent') == 1


@pytest.mark.integration
class TestReportRepository:

    def test_clean_attachments_drops_incomplete(self):
        cleaned = clean_attachments([
            {'fileName': 'a.jpg', 'fileUrl': 'https://x/a.jpg'},
            {'fileName': 'b.jpg'},
            {'fileUrl': 'https://x/c.jpg'},
            None,
        ])
        assert cleaned == [{'note': '', 'fileName': 'a.jpg', 'fileType': 'unknown',
                            'fileUrl': 'https://x/a.jpg'}]

    def test_create_skips_blank_optional_fields(self, make_repo):
        report = make_repo(ReportRepository).create({
            'site_id': 'site-a',
            'report_type': 'installation',
            'location': '   ',
            'description_of_work': '  Installed vinyl.  ',
            'attachments': [{'fileName': 'a.jpg', 'fileUrl': 'https://x/a.jpg'}, {}],
        })
        assert report['location'] is None
        assert report['description_of_work'] == 'Installed vinyl.'
        assert len(report['attachments']) == 1
        assert report['status'] == 'draft'

    def test_post_marks_posted(self, make_repo):
        report = make_repo(ReportRepository).post({'site_id': 's', 'report_type': 'monitoring'})
        assert report['status'] == 'posted'

    def test_update_ignores_empty_values(self, make_repo):
        repo = make_repo(ReportRepository)
        report = repo.create({'site_id': 's', 'report_type': 'monitoring', 'site_name': 'EDSA'})
        updated = repo.update(report['id'], {'site_name': '', 'sales': 'Ana Reyes'})
        assert updated['site_name'] == 'EDSA'
        assert updated['sales'] == 'Ana Reyes'

    def test_recent_and_filters(self, make_repo):
        repo = make_repo(ReportRepository)
        for n in range(3):
            repo.create({'site_id': f"s{n}", 'report_type': 'monitoring'})
        repo.create({'site_id': 'x', 'report_type': 'installation'})
        assert len(repo.recent(limit=2)) == 2
        assert len(repo.list_by_type('installation')) == 1
        assert repo.list_paginated(report_type='monitoring')['total'] == 3

    def test_delete_unindexes(self, make_repo, indexer):
        repo = make_repo(ReportRepository)
        report = repo.create({'site_id': 's', 'report_type': 'monitoring'})
        assert repo.delete(report['id']) is True
        assert repo.get(report['id']) is None
        assert ('reports', report['id']) in indexer.deleted
        assert repo.delete(report['id']) is False
