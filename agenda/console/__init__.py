from agenda.console.api import APIRequestError, RecordsAPI, ResponseFormatError
from agenda.console.forms import ClientFormData, VisitFormData, format_phone
from agenda.console.log import EventLog, LogEntry, LogLevel
from agenda.console.models import Address, ClientRecord, VisitRecord, VisitStatus
from agenda.console.state import ClientView, CollectionCache, Confirmation, Console, Tab, VisitView
