"""
Tests for the storage, email, search and image integrations
"""
import io
import smtplib
import pytest
import requests
from unittest.mock import MagicMock, Mock, patch

from botocore.exceptions import ClientError
from PIL import Image as PILImage

from documents.images import load_image
from services.email_service import (
    EmailDeliveryError,
    EmailService,
    render_cost_estimate_email,
    render_quotation_email,
)
from services.search_indexer import SearchIndexError, SearchIndexer
from services.storage_service import StorageError, StorageService


@pytest.mark.unit
class TestStorageService:

    def test_local_upload_and_lookup(self, tmp_path):
        storage = StorageService(local_root=str(tmp_path))
        result = storage.upload(b'%PDF-1.4', 'my report.pdf', folder='reports')

        assert result['storage_type'] == 'local'
        assert result['url'] == '/api/files/reports/my_report.pdf'
        assert (tmp_path / 'reports' / 'my_report.pdf').read_bytes() == b'%PDF-1.4'
        assert storage.local_path('reports', 'my_report.pdf').endswith('my_report.pdf')
        assert storage.local_path('reports', 'missing.pdf') is None

    def test_upload_pdf_adds_extension(self, tmp_path):
        storage = StorageService(local_root=str(tmp_path))
        assert storage.upload_pdf(b'x', 'Quotation_QT-1')['filename'] == 'Quotation_QT-1.pdf'

    def test_path_traversal_is_neutralised(self, tmp_path):
        storage = StorageService(local_root=str(tmp_path))
        result = storage.upload(b'x', '../../etc/passwd', folder='../up')
        assert '..' not in result['key']

    @patch('services.storage_service.boto3.client')
    def test_s3_upload_returns_presigned_url(self, mock_client):
        s3 = mock_client.return_value
        s3.generate_presigned_url.return_value = 'https://bucket.s3/reports/a.pdf?sig=1'

        storage = StorageService(bucket='docs', region='ap-southeast-1')
        result = storage.upload_pdf(b'%PDF', 'a.pdf', folder='reports')

        assert storage.is_remote
        assert result['url'] == 'https://bucket.s3/reports/a.pdf?sig=1'
        assert result['storage_type'] == 's3'
        s3.put_object.assert_called_once_with(
            Bucket='docs', Key='reports/a.pdf', Body=b'%PDF', ContentType='application/pdf'
        )

    @patch('services.storage_service.boto3.client')
    def test_s3_failure_raises_storage_error(self, mock_client):
        mock_client.return_value.put_object.side_effect = ClientError(
            {'Error': {'Code': 'AccessDenied', 'Message': 'denied'}}, 'PutObject'
        )
        storage = StorageService(bucket='docs')
        with pytest.raises(StorageError):
            storage.upload(b'x', 'a.pdf')

    def test_from_config_without_bucket_is_local(self):
        storage = StorageService.from_config({'OUTPUT_FOLDER': '/tmp/out'})
        assert not storage.is_remote
        assert storage.local_root == '/tmp/out'


@pytest.mark.unit
class TestEmailRendering:

    def test_cost_estimate_email(self):
        estimate = {
            'id': 'ce-1',
            'title': 'Cost Estimate for EDSA',
            'cost_estimate_number': 'CE-20240101-1234',
            'client': {'contactPerson': 'Maria', 'company': 'Acme <Beverages>'},
            'line_items': [{}, {}],
            'total_amount': 168000,
        }
        html_body, text = render_cost_estimate_email(
            estimate, 'Subject', 'Line one\nLine two', 'https://app.test', 'Test Outdoor Media')

        assert 'Dear Maria,' in text
        assert 'Total Estimated Cost: PHP 168,000.00' in text
        assert 'https://app.test/cost-estimates/view/ce-1' in text
        assert 'Acme &lt;Beverages&gt;' in html_body
        assert 'Line one<br>Line two' in html_body

    def test_quotation_email_greeting_fallback(self):
        _, text = render_quotation_email({'id': 'q1', 'items': []}, 'S', 'B',
                                         'https://app.test', 'Co')
        assert text.startswith('Dear Valued Client,')
        assert 'Site: N/A' in text


@pytest.mark.integration
class TestEmailService:

    def _service(self, db_session, company, **kwargs):
        return EmailService(db_session, company['company_id'], company['user_id'], **kwargs)

    def test_not_configured_records_failure(self, db_session, company):
        service = self._service(db_session, company)
        with pytest.raises(EmailDeliveryError) as excinfo:
            service.send('maria@acme.ph', 'Hi', 'text', '<p>html</p>')
        assert excinfo.value.record['status'] == 'failed'
        assert excinfo.value.record['error'] == 'Email service is not configured'

    @patch('services.email_service.smtplib.SMTP')
    def test_send_with_login_and_attachment(self, mock_smtp, db_session, company):
        server = mock_smtp.return_value.__enter__.return_value
        service = self._service(db_session, company, smtp_host='smtp.test', smtp_user='user',
                                smtp_password='secret', from_email='docs@test.ph')

        record = service.send('maria@acme.ph', 'Quotation', 'text', '<p>html</p>',
                              cc=['boss@acme.ph'], reply_to='agent@test.ph',
                              attachments=[('Quotation_QT-1.pdf', 'JVBERi0xLjQ=')],
                              entity_type='quotation', entity_id='q1')

        mock_smtp.assert_called_once_with('smtp.test', 587)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with('user', 'secret')
        message = server.send_message.call_args.args[0]
        assert message['From'] == 'docs@test.ph'
        assert message['Reply-To'] == 'agent@test.ph'
        assert record['status'] == 'sent'
        assert record['attachments'] == ['Quotation_QT-1.pdf']
        assert record['entity_type'] == 'quotation'

    @patch('services.email_service.smtplib.SMTP')
    def test_smtp_error_raises(self, mock_smtp, db_session, company):
        mock_smtp.return_value.__enter__.return_value.send_message.side_effect = \
            smtplib.SMTPRecipientsRefused({'maria@acme.ph': (550, b'no such user')})
        service = self._service(db_session, company, smtp_host='smtp.test', use_tls=False)
        with pytest.raises(EmailDeliveryError):
            service.send('maria@acme.ph', 'Hi', 'text', '<p>html</p>')

    def test_build_message_parts(self, db_session, company):
        service = self._service(db_session, company)
        message = service.build_message('maria@acme.ph', 'Hi', 'text', '<p>html</p>',
                                        cc=['a@b.ph', 'c@d.ph'],
                                        attachments=[('a.pdf', 'MQ=='), ('b.pdf', 'Mg==')])
        assert message['Cc'] == 'a@b.ph, c@d.ph'
        assert len(message.get_payload()) == 3
        attachment = message.get_payload()[1]
        assert attachment['Content-Transfer-Encoding'] == 'base64'
        assert attachment.get_filename() == 'a.pdf'
        assert attachment.get_payload(decode=True) == b'1'


@pytest.mark.unit
class TestSearchIndexer:

    def test_disabled_without_credentials(self):
        indexer = SearchIndexer()
        assert not indexer.enabled
        assert indexer.save_object('products', {'id': 'p1'}) is False
        assert indexer.delete_object('products', 'p1') is False
        with pytest.raises(SearchIndexError):
            indexer.search('products', 'edsa')

    @patch('services.search_indexer.requests.put')
    def test_save_object_strips_password(self, mock_put):
        indexer = SearchIndexer(app_id='APP', api_key='KEY', index_prefix='dev_')
        assert indexer.save_object('cost_estimates', {'id': 'ce1', 'password': 'X1', 'title': 'T'})

        url = mock_put.call_args.args[0]
        body = mock_put.call_args.kwargs['json']
        assert url == 'https://APP.algolia.net/1/indexes/dev_cost_estimates/ce1'
        assert body == {'id': 'ce1', 'title': 'T', 'objectID': 'ce1'}
        assert mock_put.call_args.kwargs['headers']['X-Algolia-API-Key'] == 'KEY'

    @patch('services.search_indexer.requests.delete')
    def test_write_failures_are_not_raised(self, mock_delete):
        mock_delete.side_effect = requests.ConnectionError('down')
        indexer = SearchIndexer(app_id='APP', api_key='KEY')
        assert indexer.delete_object('products', 'p1') is False

    @patch('services.search_indexer.requests.post')
    def test_search_failure_raises(self, mock_post):
        mock_post.return_value.raise_for_status.side_effect = requests.HTTPError('403')
        indexer = SearchIndexer(app_id='APP', api_key='KEY')
        with pytest.raises(SearchIndexError):
            indexer.search('products', 'edsa')

    @patch('services.search_indexer.requests.post')
    def test_search_response_shape(self, mock_post):
        mock_post.return_value.json.return_value = {'hits': [{'objectID': 'p1'}], 'nbHits': 1}
        indexer = SearchIndexer(app_id='APP', api_key='KEY')
        result = indexer.search('products', 'edsa', page=2, hits_per_page=5)
        assert result['hits'] == [{'objectID': 'p1'}]
        assert result['page'] == 2
        assert result['hitsPerPage'] == 5
        assert result['query'] == 'edsa'


@pytest.mark.unit
class TestLoadImage:

    def _png_bytes(self, size=(40, 20), mode='RGBA'):
        buffer = io.BytesIO()
        PILImage.new(mode, size, (255, 0, 0, 255) if mode == 'RGBA' else 0).save(buffer, 'PNG')
        return buffer.getvalue()

    @patch('documents.images.requests.get')
    def test_decodes_image(self, mock_get):
        mock_get.return_value = Mock(content=self._png_bytes(), raise_for_status=Mock())
        image = load_image('https://cdn.example.com/a.png')
        assert not image.placeholder
        assert (image.width, image.height) == (40, 20)

    @patch('documents.images.requests.get')
    def test_network_error_gives_placeholder(self, mock_get):
        mock_get.side_effect = requests.Timeout('slow')
        assert load_image('https://cdn.example.com/a.png').placeholder

    @patch('documents.images.requests.get')
    def test_garbage_gives_placeholder(self, mock_get):
        mock_get.return_value = MagicMock(content=b'not an image')
        assert load_image('https://cdn.example.com/a.png').placeholder

    def test_empty_url_gives_placeholder(self):
        assert load_image('').placeholder
