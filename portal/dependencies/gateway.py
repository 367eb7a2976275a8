from typing import Iterator

from portal.services.payment_gateway import PhonePeGateway


def get_payment_gateway() -> Iterator[PhonePeGateway]:
    gateway = PhonePeGateway.from_settings()
    try:
        yield gateway
    finally:
        gateway.close()
