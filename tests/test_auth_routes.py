# tests/test_auth_routes.py

"""Route tests for login, registration, logout and the identity guards."""

from models import User
from conftest import PASSWORD, login


def flashes(client):
    """Pop the pending flash messages."""
    with client.session_transaction() as sess:
        return [message for _, message in sess.pop('_flashes', [])]


class TestRegister:
    def test_register_logs_in(self, client):
        resp = client.post('/auth/register', data={
            'username': 'alice', 'email': 'alice@example.com',
            'password': PASSWORD, 'confirmPassword': PASSWORD,
        })
        assert resp.status_code == 302
        assert resp.headers['Location'].endswith('/products/')
        with client.session_transaction() as sess:
            assert sess['user'] == {'id': 1, 'username': 'alice', 'email': 'alice@example.com'}

    def test_duplicate_is_reported(self, client, make_user):
        make_user('alice', 'alice@example.com')
        resp = client.post('/auth/register', data={
            'username': 'alice', 'email': 'new@example.com',
            'password': PASSWORD, 'confirmPassword': PASSWORD,
        })
        assert resp.headers['Location'].endswith('/auth/register')
        assert 'User with this email or username already exists.' in flashes(client)
        assert User.query.count() == 1

    def test_mismatched_passwords(self, client):
        resp = client.post('/auth/register', data={
            'username': 'alice', 'email': 'alice@example.com',
            'password': PASSWORD, 'confirmPassword': 'nope',
        })
        assert resp.headers['Location'].endswith('/auth/register')
        assert User.query.count() == 0


class TestLogin:
    def test_success_binds_public_identity(self, client, make_user):
        identity = make_user('alice', 'alice@example.com')
        resp = login(client, 'alice@example.com')
        assert resp.headers['Location'].endswith('/products/')
        with client.session_transaction() as sess:
            assert sess['user'] == {'id': identity.id, 'username': 'alice', 'email': 'alice@example.com'}
            assert 'password_hash' not in sess['user']

    def test_wrong_password_and_unknown_user_look_the_same(self, client, make_user):
        make_user('alice', 'alice@example.com')
        login(client, 'alice@example.com', 'wrong-password')
        wrong_password = flashes(client)
        login(client, 'nobody@example.com', 'wrong-password')
        unknown_user = flashes(client)
        assert wrong_password == unknown_user == ['Invalid email or password.']
        with client.session_transaction() as sess:
            assert 'user' not in sess

    def test_missing_fields(self, client):
        resp = client.post('/auth/login', data={'email': ''})
        assert resp.headers['Location'].endswith('/auth/login')

    def test_guest_pages_redirect_when_logged_in(self, client, make_user):
        make_user('alice', 'alice@example.com')
        login(client, 'alice')
        for path in ('/auth/login', '/auth/register'):
            resp = client.get(path)
            assert resp.status_code == 302
            assert resp.headers['Location'].endswith('/products/')

    def test_login_page_renders(self, client):
        assert client.get('/auth/login').status_code == 200
        assert client.get('/auth/register').status_code == 200


class TestGuards:
    def test_protected_pages_redirect_to_login(self, client):
        for path in ('/products/', '/products/new', '/products/my/listings', '/users/cart',
                     '/users/dashboard', '/users/purchases'):
            resp = client.get(path)
            assert resp.status_code == 302
            assert resp.headers['Location'].endswith('/auth/login')

    def test_home_redirects(self, client, make_user):
        assert client.get('/').headers['Location'].endswith('/auth/login')
        make_user('alice', 'alice@example.com')
        login(client, 'alice')
        assert client.get('/').headers['Location'].endswith('/products/')

    def test_malformed_session_is_treated_as_anonymous(self, client):
        with client.session_transaction() as sess:
            sess['user'] = {'nope': True}
        resp = client.get('/products/')
        assert resp.headers['Location'].endswith('/auth/login')

    def test_logout_ends_session(self, client, make_user):
        make_user('alice', 'alice@example.com')
        login(client, 'alice')
        resp = client.post('/auth/logout')
        assert resp.headers['Location'].endswith('/auth/login')
        assert client.get('/products/').headers['Location'].endswith('/auth/login')
