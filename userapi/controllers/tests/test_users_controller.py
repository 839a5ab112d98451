"""Tests for :mod:`userapi.controllers.users`."""

import os
from unittest import TestCase, mock
from datetime import datetime

from pytz import UTC
from werkzeug.datastructures import MultiDict

from userapi import status
from userapi.auth import tokens
from userapi.domain import User, UserRegistration
from userapi.factory import create_web_app
from userapi.services.users.exceptions import DatastoreError, \
    RegistrationFailed, Unavailable
from userapi.controllers import users


def raise_datastore_error(*args, **kwargs):
    """Simulate a failure in the users store."""
    raise DatastoreError('the database went away')


def mock_users_module(mock_users):
    """Keep the constants of the store module on its mock."""
    mock_users.ASCENDING = 1
    mock_users.DESCENDING = -1


class ControllerTestCase(TestCase):
    """Provides an application context to run controllers in."""

    def setUp(self):
        os.environ['JWT_SECRET'] = 'foosecret'
        os.environ['ENVIRONMENT'] = 'development'
        self.app = create_web_app()
        self.context = self.app.app_context()
        self.context.push()

    def tearDown(self):
        self.context.pop()


class TestGetUsers(ControllerTestCase):
    """Tests for :func:`.users.get_users`."""

    @mock.patch(f'{users.__name__}.users')
    def test_no_params(self, mock_users):
        """No query parameters are provided."""
        mock_users_module(mock_users)
        mock_users.find.return_value = [
            User(user_id='abc123', email='jane@doe.org', user_name='jane')
        ]
        data, code, headers = users.get_users(MultiDict())
        self.assertEqual(code, status.HTTP_200_OK)
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]['id'], 'abc123')
        self.assertEqual(data[0]['userName'], 'jane')
        self.assertNotIn('password', data[0])
        mock_users.find.assert_called_once_with({}, None, None)

    @mock.patch(f'{users.__name__}.users')
    def test_gender_is_a_presence_filter(self, mock_users):
        """The value of ``gender`` selects on presence, not equality."""
        mock_users_module(mock_users)
        mock_users.find.return_value = []
        data, code, _ = users.get_users(MultiDict({'gender': 'true'}))
        self.assertEqual(code, status.HTTP_200_OK)
        self.assertEqual(data, [])
        mock_users.find.assert_called_once_with({'gender': True}, None, None)

    @mock.patch(f'{users.__name__}.users')
    def test_limit_and_sort(self, mock_users):
        """Limit and sort parameters are passed to the store."""
        mock_users_module(mock_users)
        mock_users.find.return_value = []
        users.get_users(MultiDict({'userName': 'x', 'limit': '5',
                                   'sortByFirstName': 'asc'}))
        mock_users.find.assert_called_once_with(
            {'userName': True}, 5, {'firstName': 1}
        )

    @mock.patch(f'{users.__name__}.users')
    def test_sort_descending(self, mock_users):
        """Any sort value other than ``asc`` sorts descending."""
        mock_users_module(mock_users)
        mock_users.find.return_value = []
        users.get_users(MultiDict({'limit': '0', 'sortByFirstName': 'desc'}))
        mock_users.find.assert_called_once_with({}, None, {'firstName': -1})

    @mock.patch(f'{users.__name__}.users')
    def test_bad_limit(self, mock_users):
        """The limit is not a non-negative integer."""
        mock_users_module(mock_users)
        for limit in ['foo', '-1']:
            data, code, _ = users.get_users(MultiDict({'limit': limit}))
            self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
            self.assertFalse(data['success'])
            self.assertIn('limit', data['errors'])
        mock_users.find.assert_not_called()

    @mock.patch(f'{users.__name__}.users')
    def test_limit_too_large(self, mock_users):
        """A limit too large for the database is refused."""
        mock_users_module(mock_users)
        for limit in ['9' * 30, str(2 ** 31)]:
            data, code, _ = users.get_users(MultiDict({'limit': limit}))
            self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('limit', data['errors'])
        mock_users.find.assert_not_called()

        users.get_users(MultiDict({'limit': str(2 ** 31 - 1)}))
        mock_users.find.assert_called_once_with({}, 2 ** 31 - 1, None)

    @mock.patch(f'{users.__name__}.users')
    def test_store_fails(self, mock_users):
        """The store raises an error."""
        mock_users_module(mock_users)
        mock_users.find.side_effect = raise_datastore_error
        data, code, _ = users.get_users(MultiDict())
        self.assertEqual(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(data, {
            'success': False,
            'error': 'Error retrieving users: the database went away'
        })


class TestGetUser(ControllerTestCase):
    """Tests for :func:`.users.get_user`."""

    @mock.patch(f'{users.__name__}.users')
    def test_user_exists(self, mock_users):
        """The user exists."""
        created = datetime(2020, 1, 2, 3, 4, 5, tzinfo=UTC)
        mock_users.get_user_by_id.return_value = User(
            user_id='abc123', email='jane@doe.org', user_name='jane',
            created_at=created
        )
        data, code, _ = users.get_user('abc123')
        self.assertEqual(code, status.HTTP_200_OK)
        self.assertEqual(data['email'], 'jane@doe.org')
        self.assertEqual(data['createdAt'], created.isoformat())

    @mock.patch(f'{users.__name__}.users')
    def test_no_such_user(self, mock_users):
        """There is no user with the id; this is not an error."""
        mock_users.get_user_by_id.return_value = None
        data, code, _ = users.get_user('nope')
        self.assertEqual(code, status.HTTP_200_OK)
        self.assertIsNone(data)

    @mock.patch(f'{users.__name__}.users')
    def test_store_unavailable(self, mock_users):
        """The database can't be reached."""
        mock_users.get_user_by_id.side_effect = Unavailable('down')
        data, code, _ = users.get_user('abc123')
        self.assertEqual(code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(data['error'], 'Error retrieving user abc123: down')


class TestUpdateUser(ControllerTestCase):
    """Tests for :func:`.users.update_user`."""

    def setUp(self):
        super(TestUpdateUser, self).setUp()
        self.user = User(user_id='abc123', email='jane@doe.org',
                         user_name='jane', gender='f', age=30,
                         first_name='Jane', last_name='Doe')

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_partial_update(self, mock_users, mock_forms_users):
        """Only the fields in the payload are changed."""
        mock_forms_users.does_email_exist.return_value = False
        mock_users.get_user_by_id.return_value = self.user
        mock_users.update.return_value = self.user._replace(age=31)

        data, code, _ = users.update_user('abc123', {'age': 31})
        self.assertEqual(code, status.HTTP_200_OK)
        self.assertEqual(data['age'], 31)
        mock_users.update.assert_called_once_with('abc123', {'age': 31})

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_clear_optional_field(self, mock_users, mock_forms_users):
        """An optional field can be cleared with ``null``."""
        mock_forms_users.does_email_exist.return_value = False
        mock_users.get_user_by_id.return_value = self.user
        mock_users.update.return_value = self.user._replace(gender=None)

        _, code, _ = users.update_user('abc123', {'gender': None})
        self.assertEqual(code, status.HTTP_200_OK)
        mock_users.update.assert_called_once_with('abc123', {'gender': None})

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_blank_value_clears_field(self, mock_users, mock_forms_users):
        """A blank string clears an optional field, as at registration."""
        mock_forms_users.does_email_exist.return_value = False
        mock_users.get_user_by_id.return_value = self.user
        mock_users.update.return_value = self.user._replace(
            gender=None, last_name=None
        )

        _, code, _ = users.update_user('abc123', {'gender': '',
                                                  'lastName': ''})
        self.assertEqual(code, status.HTTP_200_OK)
        mock_users.update.assert_called_once_with(
            'abc123', {'gender': None, 'lastName': None}
        )

    @mock.patch(f'{users.__name__}.users')
    def test_field_not_allowed(self, mock_users):
        """Fields outside of the allow-list are refused."""
        for payload in [{'password': 'foopass'}, {'admin': True},
                        {'age': 31, 'resetPasswordToken': 'x'}]:
            data, code, _ = users.update_user('abc123', payload)
            self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
            self.assertFalse(data['success'])
            self.assertIn('Cannot update field(s)', data['error'])
        mock_users.update.assert_not_called()

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_invalid_value(self, mock_users, mock_forms_users):
        """An allowed field is given a value that is not valid."""
        mock_forms_users.does_email_exist.return_value = False
        mock_users.get_user_by_id.return_value = self.user

        data, code, _ = users.update_user('abc123', {'email': 'notanemail'})
        self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', data['errors'])
        mock_users.update.assert_not_called()

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_email_taken(self, mock_users, mock_forms_users):
        """Another user already has the new e-mail address."""
        mock_forms_users.does_email_exist.return_value = True
        mock_users.get_user_by_id.return_value = self.user

        data, code, _ = users.update_user('abc123', {'email': 'a@b.com'})
        self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', data['errors'])
        mock_forms_users.does_email_exist.assert_called_once_with(
            'a@b.com', exclude_user_id='abc123'
        )

    @mock.patch(f'{users.__name__}.users')
    def test_no_such_user(self, mock_users):
        """There is no user with the id."""
        mock_users.get_user_by_id.return_value = None
        data, code, _ = users.update_user('nope', {'age': 31})
        self.assertEqual(code, status.HTTP_200_OK)
        self.assertIsNone(data)
        mock_users.update.assert_not_called()

    @mock.patch(f'{users.__name__}.users')
    def test_payload_not_an_object(self, mock_users):
        """The request body is a JSON array."""
        data, code, _ = users.update_user('abc123', ['age'])
        self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
        mock_users.update.assert_not_called()

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_store_fails(self, mock_users, mock_forms_users):
        """The store raises an error while updating."""
        mock_forms_users.does_email_exist.return_value = False
        mock_users.get_user_by_id.return_value = self.user
        mock_users.update.side_effect = raise_datastore_error

        data, code, _ = users.update_user('abc123', {'age': 31})
        self.assertEqual(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(
            data['error'],
            'Error updating user abc123: the database went away'
        )


class TestDeleteUser(ControllerTestCase):
    """Tests for :func:`.users.delete_user` and :func:`.users.delete_users`."""

    @mock.patch(f'{users.__name__}.users')
    def test_delete_user(self, mock_users):
        """The same response is returned whether or not the user exists."""
        data, code, _ = users.delete_user('abc123')
        self.assertEqual(code, status.HTTP_200_OK)
        self.assertEqual(data, {'success': True,
                                'msg': 'Delete user with id: abc123'})
        mock_users.delete.assert_called_once_with('abc123')

    @mock.patch(f'{users.__name__}.users')
    def test_delete_users(self, mock_users):
        """All users are deleted."""
        data, code, _ = users.delete_users()
        self.assertEqual(code, status.HTTP_200_OK)
        self.assertEqual(data, {'success': True, 'msg': 'Delete all users'})
        mock_users.delete_all.assert_called_once()

    @mock.patch(f'{users.__name__}.users')
    def test_delete_fails(self, mock_users):
        """The store raises an error."""
        mock_users.delete.side_effect = raise_datastore_error
        data, code, _ = users.delete_user('abc123')
        self.assertEqual(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(data['success'])


class TestCreateUser(ControllerTestCase):
    """Tests for :func:`.users.create_user`."""

    def setUp(self):
        super(TestCreateUser, self).setUp()
        self.payload = {
            'email': 'jane@doe.org',
            'password': 'foopass',
            'userName': 'jane',
            'age': 30,
            'admin': True
        }

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_create_user(self, mock_users, mock_forms_users):
        """A new user is registered, and a session is issued."""
        mock_forms_users.does_email_exist.return_value = False
        mock_users.register.return_value = User(
            user_id='abc123', email='jane@doe.org', user_name='jane', age=30
        )

        data, code, _ = users.create_user(self.payload)
        self.assertEqual(code, status.HTTP_201_CREATED)
        self.assertTrue(data['success'])

        registration, = mock_users.register.call_args[0]
        self.assertIsInstance(registration, UserRegistration)
        self.assertEqual(registration.email, 'jane@doe.org')
        self.assertEqual(registration.age, 30)
        self.assertFalse(hasattr(registration, 'admin'),
                         'Admin cannot be set at registration')

        session = tokens.decode(data['token'], 'foosecret')
        self.assertEqual(session.user_id, 'abc123')
        token, expires = data['cookies']['auth_session_cookie']
        self.assertEqual(token, data['token'])
        self.assertGreater(expires, datetime.now(tz=UTC))

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_missing_fields(self, mock_users, mock_forms_users):
        """Required fields are missing."""
        mock_forms_users.does_email_exist.return_value = False
        data, code, _ = users.create_user({'email': 'jane@doe.org'})
        self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', data['errors'])
        self.assertIn('userName', data['errors'])
        mock_users.register.assert_not_called()

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_short_password(self, mock_users, mock_forms_users):
        """The password is too short."""
        mock_forms_users.does_email_exist.return_value = False
        self.payload['password'] = 'foo'
        data, code, _ = users.create_user(self.payload)
        self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', data['errors'])

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_email_taken(self, mock_users, mock_forms_users):
        """A user with the e-mail address already exists."""
        mock_forms_users.does_email_exist.return_value = True
        data, code, _ = users.create_user(self.payload)
        self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', data['errors'])
        mock_users.register.assert_not_called()

    @mock.patch('userapi.controllers.forms.users')
    @mock.patch(f'{users.__name__}.users')
    def test_registration_fails(self, mock_users, mock_forms_users):
        """The store refuses the new record."""
        mock_forms_users.does_email_exist.return_value = False
        mock_users.register.side_effect = RegistrationFailed('duplicate')
        data, code, _ = users.create_user(self.payload)
        self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(data['error'], 'Error creating user: duplicate')

    def test_payload_not_an_object(self):
        """The request body is not a JSON object."""
        data, code, _ = users.create_user('foo')
        self.assertEqual(code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(data['success'])
