from datetime import datetime, timezone

import httpx
import pytest

from agenda.console import (
    ClientFormData,
    ClientRecord,
    ClientView,
    Console,
    EventLog,
    LogLevel,
    RecordsAPI,
    Tab,
    VisitFormData,
    VisitRecord,
    VisitView,
    format_phone,
)
from agenda.console.log import MAX_LOGS


# ---------------------------------------------------------------------------
# Event log
# ---------------------------------------------------------------------------

def fixed_clock():
    return datetime(2024, 1, 1, 9, 5, 7)


def test_event_log_is_newest_first_and_bounded():
    log = EventLog(clock=fixed_clock)
    for i in range(MAX_LOGS + 10):
        log.add(LogLevel.INFO, f"event {i}")

    assert len(log) == MAX_LOGS
    assert log.last.message == f"event {MAX_LOGS + 9}"
    assert log.entries[-1].message == "event 10"
    assert log.last.timestamp == "09:05:07"


def test_event_log_formats_details():
    log = EventLog(clock=fixed_clock)
    entry = log.add(LogLevel.API, "GET /api/clients - Response received", {"items": 2})
    assert entry.details == '{\n  "items": 2\n}'
    assert log.add(LogLevel.ERROR, "boom", "plain text").details == "plain text"


def test_clearing_the_log_records_the_action():
    log = EventLog(clock=fixed_clock)
    log.add(LogLevel.INFO, "one")
    log.clear()
    assert [e.message for e in log.entries] == ["Action 'Clear log' executed."]


def test_problem_report_names_the_quoted_element():
    log = EventLog(clock=fixed_clock)
    assert log.problem_report() is None

    log.add(LogLevel.ERROR, "API: Error running action 'Add client'.")
    report = log.problem_report()
    assert "the element 'Add client'" in report
    assert "[09:05:07][ERROR] API: Error running action 'Add client'." in report

    log.add(LogLevel.INFO, "Something happened.")
    assert "the element 'the last action'" in log.problem_report()


def test_no_problem_report_after_cancellation():
    log = EventLog(clock=fixed_clock)
    log.add(LogLevel.INFO, "UI: Action 'Delete visit ID 3' cancelled by user.")
    assert log.last_is_cancellation
    assert log.problem_report() is None


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "typed, expected",
    [
        ("", ""),
        ("1", "(1"),
        ("119", "(11) 9"),
        ("1198765", "(11) 98765"),
        ("11987654321", "(11) 98765-4321"),
        ("(11) 98765-43219999", "(11) 98765-4321"),
        ("abc", ""),
    ],
)
def test_format_phone(typed, expected):
    assert format_phone(typed) == expected


def test_client_form_shows_absent_values_as_blank():
    form = ClientFormData.from_client(ClientRecord(id=1, name="Ana"))
    assert form.phone == ""
    assert form.email == ""
    assert form.address.city == ""

    form.set_phone("81999990000")
    assert form.phone == "(81) 99999-0000"


def test_visit_form_defaults():
    clients = [ClientRecord(id=7, name="Ana"), ClientRecord(id=8, name="Bruno")]
    now = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)

    assert VisitFormData.for_visit(None, clients, now=now).client_id == 7
    assert VisitFormData.for_visit(None, clients, preselected_client_id=8, now=now).client_id == 8
    assert VisitFormData.for_visit(None, [], now=now).client_id == 0

    form = VisitFormData.for_visit(None, clients, now=now)
    assert form.date == "2024-05-06T07:08"
    assert form.status.value == "Agendada"

    visit = VisitRecord(
        id=3, client_id=8, clientName="Bruno",
        date=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc), subject="Intro", status="Concluída",
    )
    edited = VisitFormData.for_visit(visit, clients, preselected_client_id=7)
    assert edited.client_id == 8
    assert edited.date == "2024-01-01T10:00"
    assert edited.subject == "Intro"
    assert edited.status.value == "Concluída"


# ---------------------------------------------------------------------------
# Console against the in-process service
# ---------------------------------------------------------------------------

async def add_client(console: Console, name: str, **fields) -> ClientRecord:
    form = console.open_client_form()
    form.name = name
    for field, value in fields.items():
        setattr(form, field, value)
    assert await console.submit_client_form(form)
    return next(c for c in console.clients if c.name == name)


@pytest.mark.asyncio
async def test_start_loads_both_collections(console: Console):
    await console.start()
    assert console.is_loading is False
    assert console.clients == []
    assert console.visits == []
    assert console.log.last.message == "UI: Data loaded and state updated."


@pytest.mark.asyncio
async def test_submitting_client_form_creates_and_reloads(console: Console):
    await console.start()
    ana = await add_client(console, "Ana", phone="", email="a@x.com")

    assert ana.phone is None
    assert ana.email == "a@x.com"
    assert console.client_view == ClientView.LIST


@pytest.mark.asyncio
async def test_editing_client_updates_visit_names(console: Console):
    await console.start()
    ana = await add_client(console, "Ana")

    form = console.open_visit_form(client_id=ana.id)
    assert console.active_tab == Tab.AGENDA
    form.date = "2024-01-01T10:00"
    form.subject = "Intro"
    assert await console.submit_visit_form(form)
    assert console.visit_view == VisitView.LIST
    assert [v.client_name for v in console.visits] == ["Ana"]

    form = console.open_client_form(ana)
    form.name = "Ana Silva"
    assert await console.submit_client_form(form)
    assert [v.client_name for v in console.visits] == ["Ana Silva"]


@pytest.mark.asyncio
async def test_visit_form_without_client_is_blocked(console: Console):
    await console.start()
    form = console.open_visit_form()
    assert form.client_id == 0

    assert not await console.submit_visit_form(form)
    assert console.alerts == ["Please select a client."]
    assert console.log.last.level == LogLevel.WARN
    assert console.visits == []


@pytest.mark.asyncio
async def test_deleting_selected_client_after_confirmation(console: Console):
    await console.start()
    ana = await add_client(console, "Ana")
    form = console.open_visit_form(client_id=ana.id)
    form.subject = "Intro"
    await console.submit_visit_form(form)
    console.select_client(ana)
    assert console.client_visits(ana.id)

    confirmation = console.request_delete_client(ana.id)
    assert confirmation.element_name == "Delete client: Ana"
    await console.confirm()

    assert console.clients == []
    assert console.visits == []
    assert console.selected_client is None
    assert console.client_view == ClientView.LIST
    assert console.confirmation is None


@pytest.mark.asyncio
async def test_cancelling_delete_keeps_the_record(console: Console):
    await console.start()
    await add_client(console, "Ana")

    console.request_delete_client(console.clients[0].id)
    console.cancel()

    assert len(console.clients) == 1
    assert console.log.last_is_cancellation
    assert console.log.problem_report() is None


@pytest.mark.asyncio
async def test_delete_request_for_unknown_record_opens_nothing(console: Console):
    await console.start()
    assert console.request_delete_client(404) is None
    assert console.request_delete_visit(404) is None
    assert console.confirmation is None


@pytest.mark.asyncio
async def test_search_matches_text_and_digits(console: Console):
    await console.start()
    await add_client(console, "Ana", phone="(81) 99999-0000")
    await add_client(console, "Bruno", email="bruno@example.com", cpf="123.456.789-00")
    form = console.open_client_form()
    form.name = "Carla"
    form.address.city = "Olinda"
    await console.submit_client_form(form)

    console.set_search_term("OLIN")
    assert [c.name for c in console.filtered_clients()] == ["Carla"]
    console.set_search_term("99999")
    assert [c.name for c in console.filtered_clients()] == ["Ana"]
    console.set_search_term("456789")
    assert [c.name for c in console.filtered_clients()] == ["Bruno"]
    console.set_search_term("")
    assert len(console.filtered_clients()) == 3


@pytest.mark.asyncio
async def test_cancel_client_form_returns_to_previous_view(console: Console):
    await console.start()
    ana = await add_client(console, "Ana")

    console.open_client_form(ana)
    console.cancel_client_form()
    assert console.client_view == ClientView.DETAIL

    console.open_client_form()
    console.cancel_client_form()
    assert console.client_view == ClientView.LIST


# ---------------------------------------------------------------------------
# Failures stay inside the UI layer
# ---------------------------------------------------------------------------

def failing_api(handler) -> RecordsAPI:
    return RecordsAPI(base_url="http://test/api", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_load_failure_is_logged_not_raised():
    async with failing_api(lambda request: httpx.Response(500)) as api:
        console = Console(api)
        await console.load_data()

    assert console.is_loading is False
    assert console.log.last.level == LogLevel.ERROR
    assert "500" in console.log.last.details


@pytest.mark.asyncio
async def test_non_list_response_is_a_parse_failure():
    async with failing_api(lambda request: httpx.Response(200, json={"message": "oops"})) as api:
        console = Console(api)
        await console.load_data()

    assert console.log.last.level == LogLevel.ERROR
    assert "expected format" in console.log.last.details


@pytest.mark.asyncio
async def test_failed_submit_raises_an_alert():
    async with failing_api(lambda request: httpx.Response(500, json={"message": "Failed to create client."})) as api:
        console = Console(api)
        form = ClientFormData(name="Ana")
        assert not await console.submit_client_form(form)

    assert console.alerts == ["Could not save the client. Check the error log."]
    assert console.log.last.message == "API: Error running action 'Add client'."


@pytest.mark.asyncio
async def test_both_loads_are_awaited_when_one_fails():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        if request.url.path.endswith("/clients"):
            return httpx.Response(503)
        return httpx.Response(500)

    async with failing_api(handler) as api:
        console = Console(api)
        await console.load_data()

    assert sorted(seen) == ["/api/clients", "/api/visits"]
    assert console.log.last.level == LogLevel.ERROR
    assert "503" in console.log.last.details
    assert console.clients == []
    assert console.is_loading is False
