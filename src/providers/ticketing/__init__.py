"""Ticketing-source adapters (Ticketmaster, SeatGeek, Bandsintown)."""

from src.providers.ticketing.bandsintown_provider import BandsintownProvider
from src.providers.ticketing.seatgeek_provider import SeatGeekProvider
from src.providers.ticketing.ticketmaster_provider import TicketmasterProvider

__all__ = ["BandsintownProvider", "SeatGeekProvider", "TicketmasterProvider"]
