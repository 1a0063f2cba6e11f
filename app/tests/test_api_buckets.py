"""バケット・オブジェクトAPIのユニットテスト

テスト対象:
- GET  /api/storage/info
- GET  /api/buckets, POST /api/buckets
- GET  /api/buckets/{bucket}/exists
- GET  /api/buckets/{bucket}/tree
- POST /api/buckets/{bucket}/directories
- PUT/GET /api/buckets/{bucket}/files/{path}
- GET  /api/buckets/{bucket}/files-exists/{path}
"""

import io
import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.objectstore import DisabledStorage
from tests.helpers import make_client_error, set_listing


@pytest.fixture
def client(active_storage):
    return TestClient(create_app(storage=active_storage))


@pytest.fixture
def disabled_client(s3_config):
    return TestClient(create_app(storage=DisabledStorage(s3_config)))


# ==================== GET /api/storage/info Tests ====================

class TestStorageInfo:

    def test_active(self, client):
        response = client.get("/api/storage/info")

        assert response.status_code == 200
        assert response.json() == {
            'mode': 's3',
            'enabled': True,
            'host': 'localhost:9000',
            'bucket_name': 'artifacts'
        }

    def test_disabled(self, disabled_client):
        data = disabled_client.get("/api/storage/info").json()
        assert data['mode'] == 'disabled'
        assert data['enabled'] is False

    def test_lazy_from_env(self, monkeypatch):
        """storage未指定時は初回リクエストで環境変数から生成"""
        monkeypatch.setenv('STORAGE_MODE', 'disabled')
        app = create_app()

        response = TestClient(app).get("/api/storage/info")

        assert response.status_code == 200
        assert response.json()['mode'] == 'disabled'
        assert isinstance(app.state.storage, DisabledStorage)


# ==================== /api/buckets Tests ====================

class TestBuckets:

    def test_list(self, client, mock_client):
        mock_client.list_buckets.return_value = {'Buckets': [{'Name': 'alpha'}, {'Name': 'beta'}]}

        response = client.get("/api/buckets")

        assert response.status_code == 200
        assert response.json() == {'buckets': ['alpha', 'beta']}

    def test_list_disabled(self, disabled_client):
        assert disabled_client.get("/api/buckets").json() == {'buckets': []}

    def test_list_failure(self, client, mock_client):
        """異常系: ストレージエラーは502"""
        mock_client.list_buckets.side_effect = make_client_error('AccessDenied', 'ListBuckets')

        response = client.get("/api/buckets")

        assert response.status_code == 502
        assert response.json()['detail'] == "list failed"

    def test_create(self, client, mock_client):
        response = client.post("/api/buckets", json={'name': 'x43563'})

        assert response.status_code == 201
        assert response.json() == {'name': 'x43563'}
        mock_client.create_bucket.assert_called_once()

    def test_create_disabled(self, disabled_client):
        """異常系: 無効時は503"""
        response = disabled_client.post("/api/buckets", json={'name': 'x43563'})

        assert response.status_code == 503
        assert response.json()['detail'] == "server is not enabled"

    def test_create_empty_name(self, client):
        """異常系: 空のバケット名はバリデーションエラー"""
        assert client.post("/api/buckets", json={'name': ''}).status_code == 422

    def test_exists(self, client, mock_client):
        mock_client.head_bucket.side_effect = make_client_error('404', 'HeadBucket')

        response = client.get("/api/buckets/missing/exists")

        assert response.status_code == 200
        assert response.json() == {'bucket': 'missing', 'exists': False}


# ==================== GET /api/buckets/{bucket}/tree Tests ====================

class TestFolderTree:

    def test_recursive_tree(self, client, mock_client):
        """正常系: ネストしたツリーを返す"""
        set_listing(mock_client, [
            {'Contents': [{'Key': 'runs/1/log.txt'}, {'Key': 'runs/1/output.json'}]}
        ])

        response = client.get("/api/buckets/artifacts/tree?recursive=true")

        assert response.status_code == 200
        data = response.json()
        assert data['bucket'] == 'artifacts'
        assert data['recursive'] is True
        assert data['root']['name'] == 'artifacts'
        run = data['root']['folders']['runs']['folders']['1']
        assert set(run['folders']) == {'log.txt', 'output.json'}

    def test_default_non_recursive(self, client, mock_client):
        set_listing(mock_client, [{'CommonPrefixes': [{'Prefix': 'runs/'}]}])

        data = client.get("/api/buckets/artifacts/tree").json()

        assert data['recursive'] is False
        assert data['root']['folders'] == {'runs': {'name': 'runs', 'folders': {}}}

    def test_listing_error(self, client, mock_client):
        """異常系: 一覧取得エラーは502"""
        def pages():
            yield {'Contents': [{'Key': 'a'}, {'Key': 'b'}]}
            raise make_client_error('InternalError', 'ListObjectsV2')

        set_listing(mock_client, pages())

        response = client.get("/api/buckets/artifacts/tree?recursive=true")

        assert response.status_code == 502
        assert response.json()['detail'] == "list object error"

    def test_disabled(self, disabled_client):
        assert disabled_client.get("/api/buckets/artifacts/tree").status_code == 503

    def test_deep_tree(self, client, mock_client):
        """正常系: 511階層のキーでもツリーを返す"""
        depth = 511
        set_listing(mock_client, [{'Contents': [{'Key': "/".join(["a"] * depth)}]}])

        response = client.get("/api/buckets/artifacts/tree?recursive=true")

        assert response.status_code == 200
        assert response.headers['content-type'] == 'application/json'
        assert response.text.startswith('{"bucket": "artifacts", "recursive": true, "root": {"name": "artifacts"')
        assert response.text.count('"name": "a"') == depth

    def test_listing_error_from_any_stream_error(self, client, mock_client):
        """異常系: botocore以外の一覧エラーも502"""
        def pages():
            yield {'Contents': [{'Key': 'a'}]}
            raise ConnectionResetError("stream dropped")

        set_listing(mock_client, pages())

        response = client.get("/api/buckets/artifacts/tree?recursive=true")

        assert response.status_code == 502
        assert response.json()['detail'] == "list object error"


# ==================== Directories / Files Tests ====================

class TestDirectories:

    def test_create(self, client, mock_client):
        response = client.post("/api/buckets/artifacts/directories", json={'name': 'runs/1/'})

        assert response.status_code == 201
        assert response.json() == {'bucket': 'artifacts', 'name': 'runs/1'}
        assert mock_client.put_object.call_args.kwargs['Key'] == 'runs/1/.created'

    def test_slash_only_name(self, client):
        assert client.post("/api/buckets/artifacts/directories", json={'name': '/'}).status_code == 400


class TestFiles:

    def test_upload(self, client, mock_client):
        response = client.put(
            "/api/buckets/artifacts/files/images/a.png",
            content=b"asdf",
            headers={'Content-Type': 'image/png'}
        )

        assert response.status_code == 201
        assert response.json() == {
            'bucket': 'artifacts',
            'key': 'images/a.png',
            'size': 4,
            'content_type': 'image/png'
        }
        kwargs = mock_client.put_object.call_args.kwargs
        assert kwargs['Key'] == 'images/a.png'
        assert kwargs['Body'] == b"asdf"
        assert kwargs['ContentType'] == 'image/png'

    def test_upload_failure(self, client, mock_client):
        mock_client.put_object.side_effect = make_client_error('400', 'PutObject')

        response = client.put("/api/buckets/artifacts/files/a.txt", content=b"a")

        assert response.status_code == 502
        assert response.json()['detail'] == "create file error"

    def test_download(self, client, mock_client):
        mock_client.get_object.return_value = {
            'Body': io.BytesIO(b"hello"),
            'ContentLength': 5,
            'ContentType': 'text/plain'
        }

        response = client.get("/api/buckets/artifacts/files/runs/1/log.txt")

        assert response.status_code == 200
        assert response.content == b"hello"
        assert response.headers['content-type'].startswith('text/plain')
        mock_client.get_object.assert_called_once_with(Bucket='artifacts', Key='runs/1/log.txt')

    def test_download_content_disposition(self, client, mock_client):
        """ファイル名の"や非ASCII文字はエスケープ・RFC 5987形式で渡す"""
        mock_client.get_object.return_value = {'Body': io.BytesIO(b"x"), 'ContentLength': 1}

        response = client.get("/api/buckets/artifacts/files/runs/a%22b%E8%A1%A8.txt")

        assert response.status_code == 200
        assert response.headers['content-disposition'] == (
            'attachment; filename="a\\"b.txt"; filename*=UTF-8\'\'a%22b%E8%A1%A8.txt'
        )

    def test_download_not_found(self, client, mock_client):
        mock_client.get_object.side_effect = make_client_error('NoSuchKey', 'GetObject')

        response = client.get("/api/buckets/artifacts/files/runs/1/missing.txt")

        assert response.status_code == 404

    def test_file_exists(self, client, mock_client):
        response = client.get("/api/buckets/artifacts/files-exists/runs/1/log.txt")

        assert response.json() == {'bucket': 'artifacts', 'key': 'runs/1/log.txt', 'exists': True}
        mock_client.head_object.assert_called_once_with(Bucket='artifacts', Key='runs/1/log.txt')

    def test_file_missing(self, client, mock_client):
        mock_client.head_object.side_effect = make_client_error('404', 'HeadObject')

        response = client.get("/api/buckets/artifacts/files-exists/runs/1/log.txt")

        assert response.json()['exists'] is False

    def test_file_exists_disabled(self, disabled_client):
        response = disabled_client.get("/api/buckets/artifacts/files-exists/runs/1/log.txt")
        assert response.json()['exists'] is False


class TestMisconfigured:

    def test_invalid_env_config(self, monkeypatch):
        """異常系: 環境変数の設定不備は500"""
        monkeypatch.setenv('STORAGE_MODE', 's3')
        for name in ('S3_ENDPOINT', 'AWS_ACCESS_KEY_ID', 'AWS_SECRET_ACCESS_KEY', 'AWS_DEFAULT_REGION', 'S3_BUCKET_NAME'):
            monkeypatch.delenv(name, raising=False)

        response = TestClient(create_app()).get("/api/buckets")

        assert response.status_code == 500
        assert response.json()['detail'] == "Storage is misconfigured"
