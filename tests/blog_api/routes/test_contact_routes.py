import logging

import pytest
from pydantic import ValidationError

from blog_api.routes.contact_routes import submit_contact_form
from blog_api.schemas import ContactRequest


def test_contact_form_logs_submission(caplog) -> None:
    request = ContactRequest(name=' Ada ', email='Ada@Example.com', message='Hello there')

    with caplog.at_level(logging.INFO, logger='blog_api.routes.contact_routes'):
        response = submit_contact_form(request)

    assert response == {'ok': True}
    assert 'ada@example.com' in caplog.text
    assert 'Hello there' in caplog.text


@pytest.mark.parametrize('missing', ['name', 'email', 'message'])
def test_contact_request_requires_every_field(missing: str) -> None:
    fields = {'name': 'Ada', 'email': 'ada@example.com', 'message': 'Hi'}
    fields[missing] = ''

    with pytest.raises(ValidationError):
        ContactRequest(**fields)
