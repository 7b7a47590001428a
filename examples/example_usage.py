"""Example: drive the ledger through the service layer (no Flask).

Runs against the in-memory store so it needs no Google credentials.
"""

from src.driver_ledger.driver_ledger.container import build_container


def main():
    container = build_container(store_backend="memory", auto_provision=True)
    svc = container.ledger_service

    print(svc.clock_event(driver_name="Somchai", date_text="5/8/2568", event="clockIn", time_text="07:30").to_dict())
    print(svc.clock_event(driver_name="Somchai", date_text="5/8/2568", event="clockOut", time_text="17:45").to_dict())
    print(svc.calculate_overtime(date_text="25/8/2568", clock_in="06:00", clock_out="19:00").to_dict())
    print(svc.approve_most_recent_pending().to_dict())


if __name__ == "__main__":
    main()
