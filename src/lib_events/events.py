"""EventType — the closed set of platform event types."""

from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    """Every event the platform may publish or consume.

    Values equal member names; they are the ``type`` attribute on the wire.
    """

    ORDER_CREATED = "ORDER_CREATED"
    ORDER_PENDING = "ORDER_PENDING"
    ORDER_COMPLETED = "ORDER_COMPLETED"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    ORDER_REFUNDED = "ORDER_REFUNDED"
    ORDER_ABANDONED = "ORDER_ABANDONED"
    ORDER_AWAITING_PAYMENT = "ORDER_AWAITING_PAYMENT"
    ORDER_AWAITING_PURCHASE = "ORDER_AWAITING_PURCHASE"
    ORDER_NEEDS_ATTENTION = "ORDER_NEEDS_ATTENTION"
    ORDER_PAYMENT_FAILED = "ORDER_PAYMENT_FAILED"
    ORDER_TOUCH = "ORDER_TOUCH"

    ORDERS_CHECKSUM = "ORDERS_CHECKSUM"
    ORDERS_CHECKSUM_ERROR = "ORDERS_CHECKSUM_ERROR"

    ORDER_ITEM_CREATED = "ORDER_ITEM_CREATED"
    ORDER_ITEM_COMPLETED = "ORDER_ITEM_COMPLETED"
    ORDER_ITEM_AWAITING_DATES = "ORDER_ITEM_AWAITING_DATES"
    ORDER_ITEM_FAILED = "ORDER_ITEM_FAILED"
    ORDER_ITEM_CANCELLED = "ORDER_ITEM_CANCELLED"
    ORDER_ITEM_TOUCH = "ORDER_ITEM_TOUCH"
    ORDER_ITEM_CHANGE_DATES = "ORDER_ITEM_CHANGE_DATES"
    ORDER_ITEM_DELETE_RESERVATION = "ORDER_ITEM_DELETE_RESERVATION"
    ORDER_ITEM_UPDATE_RESERVATION = "ORDER_ITEM_UPDATE_RESERVATION"
    ORDER_ITEM_REFUND = "ORDER_ITEM_REFUND"
    ORDER_ITEMS_CHECKSUM = "ORDER_ITEMS_CHECKSUM"
    ORDER_ITEMS_CHECKSUM_ERROR = "ORDER_ITEMS_CHECKSUM_ERROR"

    ORDER_ADDON_ITEM_CANCELLED = "ORDER_ADDON_ITEM_CANCELLED"

    ORDER_FLIGHT_ITEM_CREATED = "ORDER_FLIGHT_ITEM_CREATED"
    ORDER_FLIGHT_ITEM_COMPLETED = "ORDER_FLIGHT_ITEM_COMPLETED"
    ORDER_FLIGHT_ITEM_FAILED = "ORDER_FLIGHT_ITEM_FAILED"
    ORDER_FLIGHT_ITEM_CANCELLED = "ORDER_FLIGHT_ITEM_CANCELLED"

    OFFER_UPDATE = "OFFER_UPDATE"
    OFFER_LOWEST_PRICE_UPDATE = "OFFER_LOWEST_PRICE_UPDATE"

    RATE_PLAN_UPDATE = "RATE_PLAN_UPDATE"
    RATE_PLAN_DELETE = "RATE_PLAN_DELETE"

    PROPERTY_UPDATE = "PROPERTY_UPDATE"
    PROPERTY_DELETE = "PROPERTY_DELETE"
    PROPERTY_PARENT_UPDATE = "PROPERTY_PARENT_UPDATE"

    BEDBANK_PROPERTY_RATING_UPDATE = "BEDBANK_PROPERTY_RATING_UPDATE"
    PROPERTY_RATING_UPDATE = "PROPERTY_RATING_UPDATE"
    EXPERIENCE_RATING_UPDATE = "EXPERIENCE_RATING_UPDATE"

    ROOM_AVAILABILITY_UPDATE = "ROOM_AVAILABILITY_UPDATE"
    RATE_AVAILABILITY_UPDATE = "RATE_AVAILABILITY_UPDATE"

    HOTEL_RESERVATION_SITEMINDER_ERROR = "HOTEL_RESERVATION_SITEMINDER_ERROR"
    HOTEL_RESERVATION_TRAVELCLICK_ERROR = "HOTEL_RESERVATION_TRAVELCLICK_ERROR"

    RESERVATION_FX_RATES_UPDATE = "RESERVATION_FX_RATES_UPDATE"

    SITEMINDER_CURRENCY_ERROR = "SITEMINDER_CURRENCY_ERROR"

    VOUCHER_UPDATE = "VOUCHER_UPDATE"

    TOUR_OFFER_UPDATE = "TOUR_OFFER_UPDATE"
    TOUR_UPDATE = "TOUR_UPDATE"
    TOUR_DELETE = "TOUR_DELETE"

    CONN_SF_TOUR_UPDATE = "CONN_SF_TOUR_UPDATE"

    GDPR_REMOVAL = "GDPR_REMOVAL"

    ARI_RATES_UPDATE = "ARI_RATES_UPDATE"
    ARI_INVENTORY_UPDATE = "ARI_INVENTORY_UPDATE"
    ARI_AVAILABILITY_UPDATE = "ARI_AVAILABILITY_UPDATE"

    BEDBANK_PROPERTY_FLIGHT_UPDATE = "BEDBANK_PROPERTY_FLIGHT_UPDATE"
    BEDBANK_SYNC = "BEDBANK_SYNC"
    BEDBANK_UPDATE = "BEDBANK_UPDATE"

    CRUISE_SYNC = "CRUISE_SYNC"
    CRUISE_UPDATE = "CRUISE_UPDATE"

    USER_SIGN_UP = "USER_SIGN_UP"

    CAR_HIRE_LOCATION_SYNC = "CAR_HIRE_LOCATION_SYNC"

    @classmethod
    def is_valid(cls, value: object) -> bool:
        """Return True if *value* is a member or the value of a member."""
        if isinstance(value, cls):
            return True
        return isinstance(value, str) and value in cls._value2member_map_
