"""
View state of the client application.

The server is the only source of truth: every mutation is a request followed
by a full reload of both collections. Nothing is merged or patched locally.
"""
import asyncio
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Awaitable, Callable, Dict, List, Optional

from agenda.console.api import API_ERRORS, RecordsAPI
from agenda.console.forms import ClientFormData, VisitFormData, digits_only
from agenda.console.log import EventLog, LogLevel
from agenda.console.models import ClientRecord, VisitRecord


class Tab(str, Enum):
    CLIENTS = "clients"
    AGENDA = "agenda"


class ClientView(str, Enum):
    LIST = "list"
    FORM = "form"
    DETAIL = "detail"


class VisitView(str, Enum):
    LIST = "list"
    FORM = "form"


@dataclass
class Confirmation:
    title: str
    message: str
    element_name: str
    on_confirm: Callable[[], Awaitable[None]]
    confirm_button_text: str = "Yes, delete"


class CollectionCache:
    """In-memory copy of the server's collections, replaced wholesale on reload."""

    CLIENTS = "clients"
    VISITS = "visits"

    def __init__(self):
        self._collections: Dict[str, list] = {}

    def get(self, name: str) -> list:
        return list(self._collections.get(name, []))

    def replace(self, name: str, items: list) -> None:
        self._collections[name] = list(items)

    def invalidate(self, name: Optional[str] = None) -> None:
        if name is None:
            self._collections.clear()
        else:
            self._collections.pop(name, None)


class Console:
    def __init__(self, api: RecordsAPI, log: Optional[EventLog] = None):
        self.api = api
        self.log = log or EventLog()
        self.cache = CollectionCache()
        self.is_loading = True
        self.active_tab = Tab.CLIENTS

        self.client_view = ClientView.LIST
        self.editing_client: Optional[ClientRecord] = None
        self.selected_client: Optional[ClientRecord] = None
        self.search_term = ""

        self.visit_view = VisitView.LIST
        self.editing_visit: Optional[VisitRecord] = None
        self.preselected_client_id: Optional[int] = None

        self.confirmation: Optional[Confirmation] = None
        self.alerts: List[str] = []

    @property
    def clients(self) -> List[ClientRecord]:
        return self.cache.get(CollectionCache.CLIENTS)

    @property
    def visits(self) -> List[VisitRecord]:
        return self.cache.get(CollectionCache.VISITS)

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    async def start(self) -> None:
        self.log.add(LogLevel.INFO, "Application started.")
        await self.load_data()

    async def load_data(self) -> None:
        self.log.add(LogLevel.INFO, "UI: Loading data from the backend...")
        self.is_loading = True
        try:
            clients_request = self.api.list_clients()
            self.log.add(LogLevel.API, "GET /api/clients - Sent")
            visits_request = self.api.list_visits()
            self.log.add(LogLevel.API, "GET /api/visits - Sent")

            clients, visits = await asyncio.gather(clients_request, visits_request, return_exceptions=True)
            for outcome in (clients, visits):
                if isinstance(outcome, BaseException):
                    raise outcome

            self.log.add(LogLevel.API, "GET /api/clients - Response received", {"items": len(clients)})
            self.log.add(LogLevel.API, "GET /api/visits - Response received", {"items": len(visits)})

            visits = sorted(visits, key=lambda v: v.date, reverse=True)
            self.cache.replace(CollectionCache.CLIENTS, clients)
            self.cache.replace(CollectionCache.VISITS, visits)
            self._refresh_selected_client()
            self.log.add(
                LogLevel.INFO,
                "UI: Data loaded and state updated.",
                {"clients": len(clients), "visits": len(visits)},
            )
        except API_ERRORS as e:
            self.log.add(LogLevel.ERROR, "API: Failed to load data. Check that the backend is running.", str(e))
        finally:
            self.is_loading = False

    def _refresh_selected_client(self) -> None:
        if self.selected_client is None:
            return
        fresh = [c for c in self.clients if c.id == self.selected_client.id]
        self.selected_client = fresh[0] if fresh else None

    def clear_log(self) -> None:
        self.log.clear()

    # Navigation

    def switch_tab(self, tab: Tab) -> None:
        self.active_tab = tab
        self.log.add(LogLevel.INFO, f"Tab '{tab.value}' selected.")

    def set_search_term(self, term: str) -> None:
        self.search_term = term
        self.log.add(LogLevel.INFO, f"UI: Client search for term: '{term}'.")

    def filtered_clients(self) -> List[ClientRecord]:
        term = self.search_term
        if not term:
            return self.clients
        lowered = term.lower()
        digits = digits_only(term)

        def matches(client: ClientRecord) -> bool:
            return bool(
                lowered in client.name.lower()
                or (client.email and lowered in client.email.lower())
                or (client.address and lowered in client.address.city.lower())
                or (digits and client.phone and digits in digits_only(client.phone))
                or (digits and client.cpf and digits in digits_only(client.cpf))
            )

        return [c for c in self.clients if matches(c)]

    def client_visits(self, client_id: int) -> List[VisitRecord]:
        return [v for v in self.visits if v.client_id == client_id]

    def select_client(self, client: ClientRecord) -> None:
        self.log.add(LogLevel.INFO, f"List item 'Client: {client.name}' clicked to view details.")
        self.selected_client = client
        self.client_view = ClientView.DETAIL

    def back_to_client_list(self) -> None:
        self.client_view = ClientView.LIST
        self.log.add(LogLevel.INFO, "Button 'Back to list' clicked.")

    def open_client_form(self, client: Optional[ClientRecord] = None) -> ClientFormData:
        self.editing_client = client
        self.client_view = ClientView.FORM
        self.log.add(
            LogLevel.INFO,
            f"Button 'Edit client: {client.name}' clicked." if client else "Button '+ New client' clicked.",
        )
        return ClientFormData.from_client(client)

    def cancel_client_form(self) -> None:
        self.client_view = ClientView.DETAIL if self.editing_client else ClientView.LIST
        self.log.add(LogLevel.INFO, "Action 'Edit/create client' cancelled.")

    def open_visit_form(
        self, visit: Optional[VisitRecord] = None, client_id: Optional[int] = None
    ) -> VisitFormData:
        self.editing_visit = visit
        self.preselected_client_id = client_id
        self.active_tab = Tab.AGENDA
        self.visit_view = VisitView.FORM
        if visit:
            message = f"Button 'Edit visit ID {visit.id}' clicked."
        elif client_id:
            message = f"Button '+ Schedule new visit' clicked for client ID {client_id}."
        else:
            message = "Button '+ New visit' clicked."
        self.log.add(LogLevel.INFO, message)
        return VisitFormData.for_visit(visit, self.clients, client_id)

    def cancel_visit_form(self) -> None:
        self.visit_view = VisitView.LIST
        self.preselected_client_id = None
        self.log.add(LogLevel.INFO, "Action 'Edit/create visit' cancelled.")

    # Deletion with confirmation

    def request_delete_client(self, client_id: int) -> Optional[Confirmation]:
        client = next((c for c in self.clients if c.id == client_id), None)
        if client is None:
            return None
        element_name = f"Delete client: {client.name}"
        return self._open_confirmation(
            Confirmation(
                title="Confirm deletion",
                message=(
                    "Are you sure you want to delete this client? All related visits "
                    "will also be removed. This action cannot be undone."
                ),
                element_name=element_name,
                on_confirm=partial(self._delete_client, client_id, element_name),
            )
        )

    def request_delete_visit(self, visit_id: int) -> Optional[Confirmation]:
        if not any(v.id == visit_id for v in self.visits):
            return None
        element_name = f"Delete visit ID {visit_id}"
        return self._open_confirmation(
            Confirmation(
                title="Confirm deletion",
                message="Are you sure you want to delete this visit? This action cannot be undone.",
                element_name=element_name,
                on_confirm=partial(self._delete_visit, visit_id, element_name),
            )
        )

    def _open_confirmation(self, confirmation: Confirmation) -> Confirmation:
        self.log.add(LogLevel.WARN, f"UI: Delete dialog opened for '{confirmation.element_name}'.")
        self.confirmation = confirmation
        return confirmation

    async def confirm(self) -> None:
        confirmation, self.confirmation = self.confirmation, None
        if confirmation is None:
            return
        self.log.add(LogLevel.INFO, f"UI: Deletion confirmed for '{confirmation.element_name}'.")
        await confirmation.on_confirm()

    def cancel(self) -> None:
        confirmation, self.confirmation = self.confirmation, None
        if confirmation is None:
            return
        self.log.add(LogLevel.INFO, f"UI: Action '{confirmation.element_name}' cancelled by user.")

    async def _delete_client(self, client_id: int, element_name: str) -> None:
        self.log.add(LogLevel.API, f"DELETE /api/clients/{client_id} - Sent")
        was_selected = self.selected_client is not None and self.selected_client.id == client_id
        try:
            await self.api.delete_client(client_id)
        except API_ERRORS as e:
            self.log.add(LogLevel.ERROR, f"API: Error running action '{element_name}'.", str(e))
            return
        self.log.add(LogLevel.API, f"DELETE /api/clients/{client_id} - Success")
        await self.load_data()
        if was_selected:
            self.client_view = ClientView.LIST
        self.log.add(LogLevel.INFO, "UI: Client and related visits deleted.")

    async def _delete_visit(self, visit_id: int, element_name: str) -> None:
        self.log.add(LogLevel.API, f"DELETE /api/visits/{visit_id} - Sent")
        try:
            await self.api.delete_visit(visit_id)
        except API_ERRORS as e:
            self.log.add(LogLevel.ERROR, f"API: Error running action '{element_name}'.", str(e))
            return
        self.log.add(LogLevel.API, f"DELETE /api/visits/{visit_id} - Success")
        await self.load_data()
        self.log.add(LogLevel.INFO, f"UI: Visit ID {visit_id} deleted.")

    # Form submission

    async def submit_client_form(self, form: ClientFormData) -> bool:
        client = self.editing_client
        action = "Save changes" if client else "Add client"
        self.log.add(LogLevel.INFO, f"UI: Button '{action}' clicked.", {"formData": form.payload()})

        if client:
            method, path = "PUT", f"/clients/{client.id}"
        else:
            method, path = "POST", "/clients"
        self.log.add(LogLevel.API, f"{method} {path} - Sent")
        try:
            if client:
                saved = await self.api.update_client(client.id, form.payload())
            else:
                saved = await self.api.create_client(form.payload())
        except API_ERRORS as e:
            self.log.add(LogLevel.ERROR, f"API: Error running action '{action}'.", str(e))
            self.alert("Could not save the client. Check the error log.")
            return False

        self.log.add(LogLevel.API, f"{method} {path} - Success", saved)
        await self.load_data()
        self.client_view = ClientView.LIST
        return True

    async def submit_visit_form(self, form: VisitFormData) -> bool:
        if not form.client_id:
            self.log.add(LogLevel.WARN, "Action 'Schedule visit' blocked: no client selected.")
            self.alert("Please select a client.")
            return False

        visit = self.editing_visit
        action = "Save visit changes" if visit else "Schedule visit"
        self.log.add(LogLevel.INFO, f"UI: Button '{action}' clicked.", {"formData": form.payload()})

        if visit:
            method, path = "PUT", f"/visits/{visit.id}"
        else:
            method, path = "POST", "/visits"
        self.log.add(LogLevel.API, f"{method} {path} - Sent")
        try:
            if visit:
                saved = await self.api.update_visit(visit.id, form.payload())
            else:
                saved = await self.api.create_visit(form.payload())
        except API_ERRORS as e:
            self.log.add(LogLevel.ERROR, f"API: Error running action '{action}'.", str(e))
            self.alert("Could not save the visit. Check the error log.")
            return False

        self.log.add(LogLevel.API, f"{method} {path} - Success", saved)
        await self.load_data()
        self.visit_view = VisitView.LIST
        self.preselected_client_id = None
        return True
