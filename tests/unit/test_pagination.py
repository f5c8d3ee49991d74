from turnos.clinic.api.schemas import ConsultorioRead
from turnos.clinic.infrastructure.models import ConsultorioModel
from turnos.shared.pagination import DEFAULT_LIMIT, MAX_LIMIT, Page, PageRequest


def test_defaults_when_nothing_given():
    req = PageRequest.build()
    assert (req.page, req.limit, req.sort, req.order, req.filter) == (1, DEFAULT_LIMIT, None, None, None)


def test_out_of_range_values_fall_back():
    req = PageRequest.build(page=0, limit=-5)
    assert req.page == 1
    assert req.limit == DEFAULT_LIMIT


def test_limit_is_capped():
    assert PageRequest.build(limit=500).limit == MAX_LIMIT


def test_order_is_case_insensitive_and_validated():
    assert PageRequest.build(order="desc").descending is True
    assert PageRequest.build(order="sideways").order is None
    assert PageRequest.build(order="sideways").descending is False


def test_blank_filter_is_dropped():
    assert PageRequest.build(filter="   ").filter is None
    assert PageRequest.build(filter=" ana ").filter == "ana"


def test_offset():
    assert PageRequest.build(page=3, limit=20).offset == 40


def test_default_sort_fills_only_what_is_missing():
    assert PageRequest.build().with_default_sort("fechaHora", "DESC").order == "DESC"
    explicit = PageRequest.build(sort="estado", order="asc")
    assert explicit.with_default_sort("fechaHora", "DESC") is explicit


def test_default_sort_keeps_caller_order():
    req = PageRequest.build(order="desc").with_default_sort("fechaHora")
    assert (req.sort, req.order) == ("fechaHora", "DESC")
    req = PageRequest.build(sort="estado").with_default_sort("fechaHora", "DESC")
    assert (req.sort, req.order) == ("estado", "DESC")


def test_page_converts_rows_to_schema():
    req = PageRequest.build(page=2, limit=1)
    page = Page.of([ConsultorioModel(id=7, nombre="Sur", is_active=True)], 3, req)
    out = page.to(ConsultorioRead).model_dump(by_alias=True)
    assert out == {
        "data": [{"id": 7, "nombre": "Sur", "isActive": True}],
        "total": 3,
        "page": 2,
        "limit": 1,
    }
