"""
Integration tests for the API blueprints
"""
import io
import smtplib
import pytest
from unittest.mock import MagicMock, patch

from database.connection import get_db_session
from database.models import EmailRecord
from services.search_indexer import SearchIndexer


@pytest.fixture
def cost_estimate(client, headers, sample_client):
    """Two-site cost estimate created through the API"""
    response = client.post('/api/cost-estimates', headers=headers, json={
        'client': sample_client,
        'sites': [
            {'id': 'site-a', 'name': 'EDSA Guadalupe', 'location': 'Makati', 'price': 100000},
            {'id': 'site-b', 'name': 'C5 Libis', 'location': 'Quezon City', 'price': 80000,
             'type': 'LED'},
        ],
        'startDate': '2024-02-01',
        'endDate': '2024-03-01',
    })
    assert response.status_code == 201
    return response.get_json()['cost_estimate']


@pytest.fixture
def quotation(client, headers):
    response = client.post('/api/quotations', headers=headers, json={
        'client_name': 'Maria Santos',
        'client_company_name': 'Acme Beverages',
        'start_date': '2024-01-01',
        'end_date': '2024-01-31',
        'items': [{'id': 'site-a', 'name': 'EDSA Guadalupe', 'price': 90000}],
    })
    assert response.status_code == 201
    return response.get_json()['quotation']


@pytest.fixture
def report(client, headers):
    response = client.post('/api/reports', headers=headers, json={
        'site_id': 'site-a',
        'site_name': 'EDSA Guadalupe',
        'report_type': 'monitoring',
        'description_of_work': 'Checked lights.',
    })
    assert response.status_code == 201
    return response.get_json()['report']


@pytest.mark.integration
class TestTenantContext:

    def test_company_required(self, client):
        response = client.get('/api/products')
        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_company_from_query_string(self, client, company):
        response = client.get(f"/api/products?company_id={company['company_id']}")
        assert response.status_code == 200


@pytest.mark.integration
class TestCatalogRoutes:

    def test_product_lifecycle(self, client, headers):
        assert client.post('/api/products', headers=headers, json={}).status_code == 400

        created = client.post('/api/products', headers=headers,
                              json={'name': 'EDSA Guadalupe', 'price': 150000})
        assert created.status_code == 201
        product_id = created.get_json()['product']['id']

        listing = client.get('/api/products', headers=headers).get_json()
        assert listing['total'] == 1
        assert listing['has_more'] is False

        assert client.delete(f"/api/products/{product_id}", headers=headers).status_code == 200
        assert client.get(f"/api/products/{product_id}", headers=headers).status_code == 404

    def test_bad_pagination(self, client, headers):
        response = client.get('/api/products?page=abc', headers=headers)
        assert response.status_code == 400
        assert response.get_json()['field'] == 'page'

    def test_client_invalid_email(self, client, headers):
        response = client.post('/api/clients', headers=headers,
                               json={'name': 'Maria', 'email': 'not-an-email'})
        assert response.status_code == 400

    def test_client_by_email(self, client, headers):
        client.post('/api/clients', headers=headers,
                    json={'name': 'Maria', 'email': 'maria@acme.ph'})
        found = client.get('/api/clients/by-email?email=MARIA@acme.ph', headers=headers)
        assert found.status_code == 200
        missing = client.get('/api/clients/by-email?email=x@acme.ph', headers=headers)
        assert missing.status_code == 404

    def test_team_members(self, client, headers):
        team_id = client.post('/api/teams', headers=headers,
                              json={'name': 'Alpha'}).get_json()['team']['id']
        assert client.post(f"/api/teams/{team_id}/members", headers=headers,
                           json={}).status_code == 400
        team = client.post(f"/api/teams/{team_id}/members", headers=headers,
                           json={'id': 'u1', 'name': 'Jun'}).get_json()['team']
        assert team['members'][0]['id'] == 'u1'
        team = client.delete(f"/api/teams/{team_id}/members/u1", headers=headers).get_json()['team']
        assert team['members'] == []


@pytest.mark.integration
class TestSalesRoutes:

    def test_proposal_requires_products(self, client, headers):
        response = client.post('/api/proposals', headers=headers, json={'title': 'Q1'})
        assert response.status_code == 400

    def test_proposal_count(self, client, headers):
        client.post('/api/proposals', headers=headers,
                    json={'title': 'Q1', 'products': [{'id': 'a', 'price': 1}]})
        assert client.get('/api/proposals/count', headers=headers).get_json()['count'] == 1

    def test_cost_estimate_validation(self, client, headers, sample_client):
        response = client.post('/api/cost-estimates', headers=headers,
                               json={'client': sample_client, 'sites': []})
        assert response.status_code == 400

        response = client.post('/api/cost-estimates', headers=headers, json={
            'client': sample_client,
            'sites': [{'id': 'a', 'name': 'EDSA'}],
            'startDate': '2024-03-01',
            'endDate': '2024-02-01',
        })
        assert response.status_code == 400

    def test_cost_estimate_sites(self, client, headers, cost_estimate):
        response = client.get(f"/api/cost-estimates/{cost_estimate['id']}/sites", headers=headers)
        sites = response.get_json()['sites']
        assert [s['site'] for s in sites] == ['EDSA Guadalupe', 'C5 Libis']
        assert sites[0]['cost_estimate_number'].endswith('-A')

    def test_multiple_cost_estimates_grouped(self, client, headers, sample_client):
        created = client.post('/api/cost-estimates/multiple', headers=headers, json={
            'client': sample_client,
            'sites': [{'id': 'a', 'name': 'EDSA'}, {'id': 'b', 'name': 'C5'}],
        }).get_json()
        assert created['page_id'].startswith('PAGE-')

        grouped = client.get('/api/cost-estimates/grouped', headers=headers).get_json()
        assert grouped['total'] == 1
        assert grouped['groups'][0]['count'] == 2

    def test_cost_estimate_status(self, client, headers, cost_estimate):
        url = f"/api/cost-estimates/{cost_estimate['id']}/status"
        assert client.put(url, headers=headers, json={}).status_code == 400
        assert client.put(url, headers=headers, json={'status': 'paid'}).status_code == 400
        response = client.put(url, headers=headers, json={'status': 'approved'})
        assert response.get_json()['cost_estimate']['status'] == 'approved'

    def test_missing_cost_estimate_status(self, client, headers):
        response = client.put('/api/cost-estimates/nope/status', headers=headers,
                              json={'status': 'sent'})
        assert response.status_code == 404

    def test_calculate_quotation(self, client):
        response = client.post('/api/quotations/calculate', json={
            'start_date': '2024-01-01', 'end_date': '2024-01-31',
            'items': [{'id': 'a', 'price': 90000}],
        })
        assert response.status_code == 200
        assert response.get_json()['total_amount'] == pytest.approx(90000)

    def test_calculate_quotation_needs_dates(self, client):
        assert client.post('/api/quotations/calculate', json={}).status_code == 400

    def test_booking_requires_accepted_quotation(self, client, headers, quotation):
        url = f"/api/quotations/{quotation['id']}/booking"
        assert client.post(url, headers=headers).status_code == 409

        client.put(f"/api/quotations/{quotation['id']}/status", headers=headers,
                   json={'status': 'accepted'})
        response = client.post(url, headers=headers)
        assert response.status_code == 201
        assert response.get_json()['booking']['status'] == 'RESERVED'

        count = client.get('/api/bookings/count', headers=headers).get_json()['count']
        assert count == 1

    def test_job_order_assignment(self, client, headers, quotation):
        created = client.post(f"/api/quotations/{quotation['id']}/job-order", headers=headers,
                              json={'notes': 'Install Monday'})
        assert created.status_code == 201
        job_order_id = created.get_json()['job_order']['id']

        url = f"/api/job-orders/{job_order_id}/assign"
        assert client.post(url, headers=headers, json={}).status_code == 400
        response = client.post(url, headers=headers,
                               json={'assigned_to': 'crew-1', 'assigned_name': 'Team Alpha'})
        assert response.get_json()['job_order']['status'] == 'in_progress'


@pytest.mark.integration
class TestDocumentRoutes:

    def test_report_pdf_requires_id(self, client, headers):
        assert client.post('/api/generate-report-pdf', headers=headers, json={}).status_code == 400

    def test_report_pdf_missing_report(self, client, headers):
        response = client.post('/api/generate-report-pdf', headers=headers,
                               json={'reportId': 'nope'})
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Report not found'

    def test_report_pdf_uploaded_and_served(self, client, headers, report):
        response = client.post('/api/generate-report-pdf', headers=headers,
                               json={'reportId': report['id']})
        assert response.status_code == 200
        body = response.get_json()
        assert body['filename'].startswith(f"report-{report['id']}-")
        assert body['url'].startswith('/api/files/reports/')

        download = client.get(body['url'])
        assert download.status_code == 200
        assert download.data.startswith(b'%PDF')

    def test_cost_estimate_pdf_one_file_per_site(self, client, headers, cost_estimate):
        response = client.post('/api/generate-cost-estimate-pdf', headers=headers,
                               json={'costEstimateId': cost_estimate['id']})
        files = response.get_json()['files']
        number = cost_estimate['cost_estimate_number']
        assert [f['filename'] for f in files] == [f"{number}-A.pdf", f"{number}-B.pdf"]
        assert [f['site'] for f in files] == ['EDSA Guadalupe', 'C5 Libis']

    def test_cost_estimate_pdf_selected_site(self, client, headers, cost_estimate):
        response = client.post('/api/generate-cost-estimate-pdf', headers=headers, json={
            'costEstimateId': cost_estimate['id'], 'selectedPages': ['C5 Libis'],
        })
        assert len(response.get_json()['files']) == 1

    def test_cost_estimate_pdf_unknown_site(self, client, headers, cost_estimate):
        response = client.post('/api/generate-cost-estimate-pdf', headers=headers, json={
            'costEstimateId': cost_estimate['id'], 'selectedPages': ['Nowhere'],
        })
        assert response.status_code == 400

    def test_inline_quotation_pdf(self, client, headers, quotation):
        response = client.get(f"/api/quotations/{quotation['id']}/pdf", headers=headers)
        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data.startswith(b'%PDF')

    def test_inline_detailed_cost_estimate(self, client, headers, cost_estimate):
        response = client.get(
            f"/api/cost-estimates/{cost_estimate['id']}/pdf?site=C5%20Libis&detailed=true",
            headers=headers)
        assert response.status_code == 200
        assert 'inline' in response.headers['Content-Disposition']

    def test_inline_unknown_kind(self, client, headers):
        assert client.get('/api/invoices/abc/pdf', headers=headers).status_code == 404

    def test_missing_file(self, client):
        assert client.get('/api/files/reports/missing.pdf').status_code == 404


@pytest.mark.integration
class TestAttachmentUpload:

    def test_upload_image(self, client, headers):
        response = client.post('/api/reports/attachments', headers=headers,
                               data={'file': (io.BytesIO(b'fake image bytes'), 'site photo.jpg')},
                               content_type='multipart/form-data')
        assert response.status_code == 201
        attachment = response.get_json()['attachment']
        assert attachment['fileName'] == 'site_photo.jpg'
        assert attachment['fileUrl'].startswith('/api/files/report-attachments/')

    def test_rejects_disallowed_type(self, client, headers):
        response = client.post('/api/reports/attachments', headers=headers,
                               data={'file': (io.BytesIO(b'MZ'), 'virus.exe')},
                               content_type='multipart/form-data')
        assert response.status_code == 400

    def test_rejects_empty_file(self, client, headers):
        response = client.post('/api/reports/attachments', headers=headers,
                               data={'file': (io.BytesIO(b''), 'empty.png')},
                               content_type='multipart/form-data')
        assert response.status_code == 400


@pytest.mark.integration
class TestEmailRoutes:

    def _payload(self, record_id, **overrides):
        payload = {
            'id': record_id,
            'clientEmail': 'maria@acme.ph',
            'subject': 'Your quotation',
            'body': 'Please find attached.',
            'currentUserEmail': 'agent@testoutdoor.ph',
        }
        payload.update(overrides)
        return payload

    def test_invalid_recipient(self, client, headers, quotation):
        response = client.post('/api/quotations/send-email', headers=headers,
                               json=self._payload(quotation['id'], clientEmail='nope'))
        assert response.status_code == 400
        assert response.get_json()['error'] == "Invalid 'To' email address format"

    def test_missing_fields(self, client, headers):
        response = client.post('/api/quotations/send-email', headers=headers, json={'id': 'x'})
        assert response.get_json()['error'] == 'Missing required data'

    def test_unknown_record(self, client, headers):
        response = client.post('/api/quotations/send-email', headers=headers,
                               json=self._payload('missing'))
        assert response.status_code == 404

    def test_unconfigured_smtp_records_failure(self, client, headers, quotation):
        response = client.post('/api/quotations/send-email', headers=headers,
                               json=self._payload(quotation['id']))
        assert response.status_code == 500
        assert response.get_json()['details'] == 'Email service is not configured'

        with get_db_session() as session:
            records = session.query(EmailRecord).all()
            assert [r.status for r in records] == ['failed']

    def test_sent_email_marks_draft_sent(self, app, client, headers, cost_estimate):
        app.config['SMTP_HOST'] = 'smtp.test'
        with patch('services.email_service.smtplib.SMTP') as mock_smtp:
            server = mock_smtp.return_value.__enter__.return_value
            response = client.post('/api/cost-estimates/send-email', headers=headers,
                                   json=self._payload(cost_estimate['id'],
                                                      ccEmail='boss@acme.ph'))

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['status'] == 'sent'
        assert len(data['attachments']) == 2
        assert server.send_message.call_args.kwargs['to_addrs'] == ['maria@acme.ph', 'boss@acme.ph']
        message = server.send_message.call_args.args[0]
        pdf_parts = [part for part in message.walk() if part.get_content_type() == 'application/pdf']
        assert [part.get_filename() for part in pdf_parts] == data['attachments']
        assert pdf_parts[0].get_payload(decode=True).startswith(b'%PDF')

        estimate = client.get(f"/api/cost-estimates/{cost_estimate['id']}",
                              headers=headers).get_json()['cost_estimate']
        assert estimate['status'] == 'sent'

    def test_smtp_failure(self, app, client, headers, quotation):
        app.config['SMTP_HOST'] = 'smtp.test'
        with patch('services.email_service.smtplib.SMTP',
                   side_effect=smtplib.SMTPConnectError(421, 'busy')):
            response = client.post('/api/quotations/send-email', headers=headers,
                                   json=self._payload(quotation['id']))
        assert response.status_code == 500
        assert response.get_json()['error'] == 'Failed to send email'


@pytest.mark.integration
class TestSearchRoute:

    def test_query_required(self, client):
        response = client.get('/api/search')
        assert response.status_code == 400
        assert response.get_json()['hits'] == []

    def test_unknown_index(self, client):
        assert client.get('/api/search?q=edsa&index=secrets').status_code == 400

    def test_not_configured(self, client):
        response = client.get('/api/search?q=edsa')
        assert response.status_code == 500
        assert response.get_json()['nbHits'] == 0

    def test_company_filter_added(self, app, client, headers):
        app.extensions['search_indexer'] = SearchIndexer(app_id='APP', api_key='KEY')
        reply = MagicMock()
        reply.json.return_value = {'hits': [{'objectID': 'p1'}], 'nbHits': 1, 'nbPages': 1}
        with patch('services.search_indexer.requests.post', return_value=reply) as mock_post:
            response = client.get('/api/search?q=edsa&filters=status:ACTIVE', headers=headers)

        assert response.status_code == 200
        assert response.get_json()['nbHits'] == 1
        sent = mock_post.call_args.kwargs['json']
        assert sent['filters'] == f"(status:ACTIVE) AND company_id:{headers['X-Company-Id']}"
        assert sent['query'] == 'edsa'
