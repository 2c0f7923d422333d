from prometheus_client import Counter, Gauge, Histogram


class SeatLockMetrics:
    """
    Seat Lock Service Core Metrics Collector

    Tracks hold outcomes (granted / sold conflict / held conflict / rejected),
    lazy expiry sweeps, settlement promotions and releases, and tickets.

    Labels stay bounded: event ids come from callers, so they go to traces and
    logs, never to label values.
    """

    def __init__(self) -> None:
        # ========== Hold Metrics ==========
        self.hold_requests = Counter(
            'seat_hold_requests_total',
            'Total seat hold requests',
            ['result'],  # result: granted/seats_sold/seats_held/invalid/error
        )

        self.hold_duration = Histogram(
            'seat_hold_duration_seconds',
            'Seat hold request processing time',
            buckets=[0.005, 0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0],
        )

        self.hold_keys_written = Counter(
            'seat_hold_keys_written_total',
            'Hold rows inserted or renewed',
        )

        # ========== Sweep Metrics ==========
        self.expired_holds_swept = Counter(
            'seat_hold_expired_swept_total',
            'Expired hold rows deleted by lazy sweep',
        )

        self.active_holds = Gauge(
            'seat_hold_active',
            'Unexpired hold rows at last health check',
        )

        # ========== Settlement Metrics ==========
        self.allocations_promoted = Counter(
            'seat_allocations_promoted_total',
            'Permanent allocations newly inserted on settlement',
        )

        self.holds_released = Counter(
            'seat_holds_released_total',
            'Hold rows deleted by release or promotion',
            ['reason'],  # reason: promote/release
        )

        # ========== Ticket Metrics ==========
        self.tickets_issued = Counter(
            'seat_tickets_issued_total',
            'Tickets issued for paid orders',
        )

        self.ticket_pass_checks = Counter(
            'seat_ticket_pass_checks_total',
            'Ticket pass verifications',
            ['result'],  # result: ok/bad_json/bad_type/bad_sig
        )

        self.check_ins = Counter(
            'seat_order_check_ins_total',
            'Orders checked in at the gate',
        )

    # ========== Helper Methods ==========

    def record_hold(self, *, result: str, duration: float) -> None:
        self.hold_requests.labels(result=result).inc()
        self.hold_duration.observe(duration)

    def record_hold_keys(self, *, count: int) -> None:
        self.hold_keys_written.inc(count)

    def record_sweep(self, *, deleted: int) -> None:
        if deleted:
            self.expired_holds_swept.inc(deleted)

    def record_promotion(self, *, inserted: int, released: int) -> None:
        self.allocations_promoted.inc(inserted)
        self.holds_released.labels(reason='promote').inc(released)

    def record_release(self, *, released: int) -> None:
        self.holds_released.labels(reason='release').inc(released)

    def set_active_holds(self, *, count: int) -> None:
        self.active_holds.set(count)

    def record_tickets_issued(self, *, count: int) -> None:
        self.tickets_issued.inc(count)

    def record_ticket_pass_check(self, *, result: str) -> None:
        self.ticket_pass_checks.labels(result=result).inc()

    def record_check_in(self) -> None:
        self.check_ins.inc()


# Global metrics instance
metrics = SeatLockMetrics()
