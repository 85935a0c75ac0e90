import pytest

from adapters.memory_adapter import MemoryAdapter
from rules.config import RuleConfiguration


@pytest.fixture
def sales_user():
    return {
        "id": "u_alex",
        "username": "alex.rivera",
        "firstname": "Alex",
        "email": "alex.rivera@ops.example.co.uk",
        "department": "Sales",
        "city": "",
        "profile": {"tags": "Operations;Responder"},
    }


@pytest.fixture
def store(sales_user):
    return MemoryAdapter(users=[sales_user])


@pytest.fixture
def unenrol_config():
    return RuleConfiguration(mainrule_fld="dept-{{ department }}", enableunenrol=True)
