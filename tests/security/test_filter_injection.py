from unittest.mock import AsyncMock

import pytest

from upkeep.core import db_client
from upkeep.modules.tasks import service


@pytest.fixture
def capture_db_queries(monkeypatch):
    """Mocks db_client.list_records to capture query parameters."""
    mock_list = AsyncMock(return_value=[])
    monkeypatch.setattr("upkeep.core.db_client.list_records", mock_list)
    return mock_list


class TestFilterInjection:
    async def test_sanitize_param_escapes_quotes(self):
        """Verify sanitize_param correctly escapes double quotes."""
        sanitized = db_client.sanitize_param('Unit 1" || true || "')

        assert sanitized == r'Unit 1\" || true || \"'

    @pytest.mark.parametrize(
        ("kwarg", "field"),
        [
            ("property_id", "property_id"),
            ("unit_tag", "unit_tag"),
            ("batch_id", "batch_id"),
            ("template_origin_id", "template_origin_id"),
        ],
    )
    async def test_get_tasks_sanitizes_filters(self, capture_db_queries, kwarg, field):
        """Every user-supplied filter value is escaped before embedding."""
        await service.get_tasks(**{kwarg: 'x" || true || "'})

        filter_query = capture_db_queries.call_args.kwargs["filter_query"]
        assert filter_query == rf'{field} = "x\" || true || \""'

    def test_escaped_value_stays_one_comparison(self):
        """The compiled filter binds a single parameter for an escaped value."""
        hostile = db_client.sanitize_param('x" || status != "')

        clause, params = db_client.parse_filter(f'unit_tag = "{hostile}"')

        assert clause == "json_extract(data, '$.unit_tag') = ?"
        assert len(params) == 1
