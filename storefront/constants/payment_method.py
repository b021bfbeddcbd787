from enum import Enum


class PaymentMethod(str, Enum):
    ONLINE = "online"
    CASH_ON_DELIVERY = "cod"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "-")
            if normalized in ("cash-on-delivery", "cod"):
                return cls.CASH_ON_DELIVERY
            if normalized == "online":
                return cls.ONLINE
        return None


DEFAULT_PAYMENT_METHOD = PaymentMethod.ONLINE
