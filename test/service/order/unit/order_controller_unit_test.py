from fastapi import status
from fastapi.testclient import TestClient
import pytest


ORDERS_URL = '/api/orders'
ORDER_REF = 'ORD-20250110-0042'


def order_payload(hold_id: str | None = None, **overrides) -> dict:
    payload = {
        'orderReference': ORDER_REF,
        'holdId': hold_id,
        'currency': 'LKR',
        'customer': {
            'firstName': 'Nimal',
            'lastName': 'Perera',
            'email': 'nimal@example.com',
            'phone': '+94770000000',
        },
        'items': [
            {'type': 'seat', 'tableId': 'A', 'seatNo': 3, 'qty': 1, 'unitPrice': 5000},
            {'type': 'vipTable', 'tableId': 'B', 'qty': 1, 'unitPrice': 45000},
        ],
    }
    payload.update(overrides)
    return payload


def hold_seats(client: TestClient) -> str:
    response = client.post(
        '/api/locks/hold',
        json={'seats': [{'tableId': 'A', 'seatNo': 3}, {'tableId': 'B', 'seatNo': 0}]},
    )
    assert response.status_code == status.HTTP_200_OK
    return response.json()['holdId']


@pytest.mark.unit
class TestCreateOrderEndpoint:
    def test_creates_order(self, client: TestClient) -> None:
        hold_id = hold_seats(client)

        response = client.post(ORDERS_URL, json=order_payload(hold_id))

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body['orderReference'] == ORDER_REF
        assert body['holdId'] == hold_id
        assert body['status'] == 'pending'
        assert body['eventId'] == 'default'
        assert body['netAmount'] == '50000.00'
        assert body['feeAmount'] == '500.00'
        assert body['grossAmount'] == '50500.00'
        assert [item['type'] for item in body['items']] == ['seat', 'vipTable']
        assert body['items'][1]['seatNo'] == 0

    def test_rejects_bad_email(self, client: TestClient) -> None:
        payload = order_payload(customer={'firstName': 'N', 'lastName': 'P', 'email': 'nope'})

        response = client.post(ORDERS_URL, json=payload)

        assert response.status_code == 422
        assert response.json() == {'detail': 'Valid email required'}

    def test_rejects_empty_items(self, client: TestClient) -> None:
        response = client.post(ORDERS_URL, json=order_payload(items=[]))

        assert response.status_code == 422
        assert response.json() == {'detail': 'No items'}

    def test_rejects_missing_reference(self, client: TestClient) -> None:
        payload = order_payload()
        del payload['orderReference']

        response = client.post(ORDERS_URL, json=payload)

        assert response.status_code == 422


@pytest.mark.unit
class TestOrderLifecycleEndpoints:
    def test_get_order(self, client: TestClient) -> None:
        client.post(ORDERS_URL, json=order_payload())

        response = client.get(f'{ORDERS_URL}/{ORDER_REF}')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['orderReference'] == ORDER_REF

    def test_get_missing_order(self, client: TestClient) -> None:
        response = client.get(f'{ORDERS_URL}/missing')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_successful_settlement(self, client: TestClient, store) -> None:
        hold_id = hold_seats(client)
        client.post(ORDERS_URL, json=order_payload(hold_id))

        response = client.post(f'{ORDERS_URL}/{ORDER_REF}/settlement', json={'succeeded': True})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['applied'] is True
        assert body['order']['status'] == 'paid'
        assert body['order']['paidAt'] is not None
        assert body['allocated'] == [{'tableId': 'A', 'seatNo': 3}, {'tableId': 'B', 'seatNo': 0}]
        assert body['released'] == 2
        assert store.hold_rows() == []

    def test_failed_settlement(self, client: TestClient, store) -> None:
        hold_id = hold_seats(client)
        client.post(ORDERS_URL, json=order_payload(hold_id))

        response = client.post(f'{ORDERS_URL}/{ORDER_REF}/settlement', json={'succeeded': False})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['order']['status'] == 'failed'
        assert response.json()['allocated'] == []
        assert store.done == {}

    def test_cancel(self, client: TestClient, store) -> None:
        hold_id = hold_seats(client)
        client.post(ORDERS_URL, json=order_payload(hold_id))

        response = client.patch(f'{ORDERS_URL}/{ORDER_REF}')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'cancelled'
        assert store.hold_rows() == []

    def test_cancel_paid_order(self, client: TestClient) -> None:
        client.post(ORDERS_URL, json=order_payload())
        client.post(f'{ORDERS_URL}/{ORDER_REF}/settlement', json={'succeeded': True})

        response = client.patch(f'{ORDERS_URL}/{ORDER_REF}')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {'detail': 'Paid order cannot be cancelled'}

    def test_resubmit_after_payment_conflicts(self, client: TestClient) -> None:
        client.post(ORDERS_URL, json=order_payload())
        client.post(f'{ORDERS_URL}/{ORDER_REF}/settlement', json={'succeeded': True})

        response = client.post(ORDERS_URL, json=order_payload())

        assert response.status_code == status.HTTP_409_CONFLICT


def pay(client: TestClient) -> None:
    hold_id = hold_seats(client)
    client.post(ORDERS_URL, json=order_payload(hold_id))
    response = client.post(
        f'{ORDERS_URL}/{ORDER_REF}/settlement',
        json={'succeeded': True, 'transactionId': 'TX-5150'},
    )
    assert response.status_code == status.HTTP_200_OK


@pytest.mark.unit
class TestTicketEndpoints:
    def test_settlement_returns_tickets(self, client: TestClient) -> None:
        hold_id = hold_seats(client)
        client.post(ORDERS_URL, json=order_payload(hold_id))

        response = client.post(
            f'{ORDERS_URL}/{ORDER_REF}/settlement',
            json={'succeeded': True, 'transactionId': 'TX-5150'},
        )

        tickets = response.json()['tickets']
        assert [(ticket['tableId'], ticket['seatNo']) for ticket in tickets] == [('A', 3)]
        assert tickets[0]['code'].startswith('T-')
        assert tickets[0]['status'] == 'valid'

    def test_pass_round_trip(self, client: TestClient) -> None:
        pay(client)

        issued = client.get(f'{ORDERS_URL}/{ORDER_REF}/ticket-pass')
        assert issued.status_code == status.HTTP_200_OK
        pass_text = issued.json()['pass']

        response = client.post(
            '/api/qr/verify', content=pass_text, headers={'Content-Type': 'text/plain'}
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['ok'] is True
        assert body['data']['orderRef'] == ORDER_REF
        assert body['data']['txId'] == 'TX-5150'
        assert body['data']['seats'] == [['A', 3]]

    def test_tampered_pass_is_rejected(self, client: TestClient) -> None:
        pay(client)
        pass_text = client.get(f'{ORDERS_URL}/{ORDER_REF}/ticket-pass').json()['pass']

        response = client.post(
            '/api/qr/verify',
            content=pass_text.replace('TX-5150', 'TX-0000'),
            headers={'Content-Type': 'text/plain'},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['ok'] is False
        assert response.json()['reason'] == 'bad_sig'

    def test_garbage_pass(self, client: TestClient) -> None:
        response = client.post('/api/qr/verify', content='hello gate')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['reason'] == 'bad_json'

    def test_pass_for_pending_order(self, client: TestClient) -> None:
        client.post(ORDERS_URL, json=order_payload())

        response = client.get(f'{ORDERS_URL}/{ORDER_REF}/ticket-pass')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_check_in(self, client: TestClient) -> None:
        pay(client)

        first = client.post('/api/admin/check-in', json={'orderRef': ORDER_REF})
        second = client.post('/api/admin/check-in', json={'orderRef': ORDER_REF})

        assert first.status_code == status.HTTP_200_OK
        assert first.json()['orderRef'] == ORDER_REF
        assert first.json()['checkedInAt'] is not None
        assert second.status_code == status.HTTP_400_BAD_REQUEST
        assert client.get(f'{ORDERS_URL}/{ORDER_REF}').json()['checkedInAt'] is not None

    def test_check_in_pending_order(self, client: TestClient) -> None:
        client.post(ORDERS_URL, json=order_payload())

        response = client.post('/api/admin/check-in', json={'orderRef': ORDER_REF})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_check_in_without_reference(self, client: TestClient) -> None:
        response = client.post('/api/admin/check-in', json={})

        assert response.status_code == 422
