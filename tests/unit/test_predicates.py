import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite

from invoicing.db import models
from invoicing.search.predicates import InvoicePredicate, PredicateBuilder, escape_like, text_pattern
from invoicing.utils.constants import ORDER_STATUS_FULFILLED, ORDER_STATUS_NOT_FULFILLED


def _compile(predicate: InvoicePredicate, dialect=None):
    stmt = predicate.apply(select(models.Invoice.key))
    return stmt.compile(dialect=dialect or sqlite.dialect())


def _param_values(compiled):
    values = []
    for value in compiled.params.values():
        if isinstance(value, (list, tuple)):
            values.extend(value)
        else:
            values.append(value)
    return values


def test_text_pattern_joins_tokens_into_one_substring():
    assert text_pattern(["john", "smith"]) == "%john% smith%"
    assert text_pattern(["acme"]) == "%acme%"


def test_escape_like_neutralizes_wildcards():
    assert escape_like("50%_off") == "50\\%\\_off"
    assert escape_like("a\\b") == "a\\\\b"


def test_empty_term_is_match_all():
    builder = PredicateBuilder(not_fulfilled_key=ORDER_STATUS_NOT_FULFILLED)
    assert builder.build_search_predicate("").is_match_all
    assert builder.build_search_predicate(None).is_match_all
    assert "WHERE" not in str(_compile(builder.build_search_predicate(" , ")))


def test_numbers_only_uses_document_number_in():
    predicate = PredicateBuilder().build_search_predicate("42 43")
    compiled = _compile(predicate)
    sql = str(compiled).lower()
    assert "invoice_number in" in sql
    assert "like" not in sql
    assert sorted(_param_values(compiled)) == [42, 43]


def test_mixed_term_ors_text_and_numbers():
    compiled = _compile(PredicateBuilder().build_search_predicate("42 smith"))
    sql = str(compiled).lower()
    assert "bill_to_name" in sql and "bill_to_email" in sql
    assert "invoice_number in" in sql
    assert " or " in sql
    assert "%smith%" in _param_values(compiled)


def test_values_are_bound_never_rendered():
    hostile = "x'; DROP TABLE invoices; --"
    predicate = PredicateBuilder().build_search_predicate(hostile)
    for dialect in (sqlite.dialect(), postgresql.dialect()):
        compiled = _compile(predicate, dialect)
        assert "DROP" not in str(compiled)
        assert any("DROP" in str(v) for v in _param_values(compiled))


def test_refinements_bind_keys_and_dates():
    status_key = uuid.uuid4()
    collection_key = uuid.uuid4()
    start, end = datetime(2024, 1, 1), datetime(2024, 1, 31)
    predicate = (
        PredicateBuilder()
        .build_search_predicate("acme")
        .with_date_range(start, end)
        .with_status_equals(status_key)
        .with_membership(collection_key)
    )
    compiled = _compile(predicate)
    sql = str(compiled)
    assert str(status_key) not in sql
    assert str(collection_key) not in sql
    assert "BETWEEN" in sql
    values = _param_values(compiled)
    assert start in values and end in values


def test_refinements_return_new_predicates():
    base = PredicateBuilder().build_search_predicate("acme")
    refined = base.with_status_not_equals(uuid.uuid4())
    assert len(base.conjuncts) == 1
    assert len(refined.conjuncts) == 2
    assert refined is not base


def test_not_fulfilled_clause_includes_orphan_branch():
    builder = PredicateBuilder(not_fulfilled_key=ORDER_STATUS_NOT_FULFILLED)
    not_fulfilled_sql = str(_compile(builder.match_all().with_order_status(ORDER_STATUS_NOT_FULFILLED))).upper()
    fulfilled_sql = str(_compile(builder.match_all().with_order_status(ORDER_STATUS_FULFILLED))).upper()
    assert not_fulfilled_sql.count("EXISTS") == 2
    assert "NOT (EXISTS" in not_fulfilled_sql or "NOT EXISTS" in not_fulfilled_sql
    assert fulfilled_sql.count("EXISTS") == 1


def test_non_membership_uses_not_in_subquery():
    sql = str(_compile(PredicateBuilder().match_all().with_non_membership(uuid.uuid4()))).upper()
    assert "NOT IN" in sql
    assert "INVOICE_COLLECTION_MEMBERSHIPS" in sql
    assert "DISTINCT" in sql


def test_builder_reads_not_fulfilled_key_from_settings(monkeypatch):
    from invoicing.utils.settings import refresh_settings_cache

    custom = uuid.uuid4()
    monkeypatch.setenv("INVOICE_NOT_FULFILLED_STATUS_KEY", str(custom))
    refresh_settings_cache()
    builder = PredicateBuilder()
    assert builder.not_fulfilled_key == custom
    assert builder.match_all().not_fulfilled_key == custom
