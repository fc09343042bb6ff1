import unittest

from api_case import ApiTestCase


class OrderApiTest(ApiTestCase):
    def setUp(self):
        super().setUp()
        _, producer_headers = self.register_producer("esperanza")
        self.tomato = self.post_product(producer_headers, price=2.5, stock_quantity=10)
        self.honey = self.post_product(producer_headers, name="Miel", price=7.25, stock_quantity=3)
        self.buyer, self.headers = self.register("cliente")

    def place(self, items, headers=None):
        return self.client.post(
            "/api/orders/",
            json={
                "items": [{"product_id": p["id"], "quantity": q} for p, q in items],
                "delivery_address": "Calle Larga 5-21, Cuenca",
            },
            headers=headers or self.headers,
        )

    def test_create_order(self):
        response = self.place([(self.tomato, 4), (self.honey, 2)])
        self.assertEqual(response.status_code, 201, response.text)
        order = response.json()
        self.assertEqual(order["total_amount"], 24.5)
        self.assertEqual(order["status"], "pending")
        self.assertEqual(order["user_id"], self.buyer["id"])
        self.assertEqual(
            [(i["product_id"], i["quantity"], i["price"]) for i in order["items"]],
            [(self.tomato["id"], 4, 2.5), (self.honey["id"], 2, 7.25)],
        )

        stock = self.client.get(f"/api/products/{self.honey['id']}").json()["stock_quantity"]
        self.assertEqual(stock, 1)

    def test_create_order_validation(self):
        self.assertEqual(self.place([]).status_code, 422)
        self.assertEqual(self.place([(self.tomato, 0)]).status_code, 422)
        self.assertEqual(self.place([({"id": 999}, 1)]).status_code, 404)
        self.assertEqual(self.place([(self.honey, 4)]).status_code, 400)

    def test_create_order_requires_auth(self):
        response = self.client.post(
            "/api/orders/",
            json={"items": [{"product_id": self.tomato["id"], "quantity": 1}], "delivery_address": "Cuenca"},
        )
        self.assertEqual(response.status_code, 401)

    def test_read_order_with_items(self):
        order = self.place([(self.tomato, 1)]).json()
        response = self.client.get(f"/api/orders/{order['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["items"]), 1)

        _, stranger = self.register("otro")
        self.assertEqual(self.client.get(f"/api/orders/{order['id']}", headers=stranger).status_code, 403)
        self.assertEqual(self.client.get("/api/orders/999", headers=self.headers).status_code, 404)

    def test_orders_by_user(self):
        first = self.place([(self.tomato, 1)]).json()
        second = self.place([(self.tomato, 1)]).json()
        response = self.client.get(f"/api/orders/user/{self.buyer['id']}", headers=self.headers)
        self.assertEqual([o["id"] for o in response.json()], [second["id"], first["id"]])

        stranger, stranger_headers = self.register("otro")
        self.assertEqual(
            self.client.get(f"/api/orders/user/{self.buyer['id']}", headers=stranger_headers).status_code, 403
        )

        _, validator = self.register("auditor", role="validator")
        response = self.client.get(f"/api/orders/user/{self.buyer['id']}", headers=validator)
        self.assertEqual(len(response.json()), 2)

    def test_status_updates(self):
        order = self.place([(self.honey, 3)]).json()
        url = f"/api/orders/{order['id']}/status"

        self.assertEqual(self.client.patch(url, json={"status": "confirmed"}, headers=self.headers).status_code, 403)

        _, validator = self.register("auditor", role="validator")
        response = self.client.patch(url, json={"status": "confirmed"}, headers=validator)
        self.assertEqual(response.json()["status"], "confirmed")

        response = self.client.patch(url, json={"status": "cancelled"}, headers=self.headers)
        self.assertEqual(response.json()["status"], "cancelled")
        honey = self.client.get(f"/api/products/{self.honey['id']}").json()
        self.assertEqual(honey["stock_quantity"], 3)
        self.assertTrue(honey["in_stock"])

        self.assertEqual(self.client.patch(url, json={"status": "delivered"}, headers=validator).status_code, 409)
        self.assertEqual(self.client.patch(url, json={"status": "lost"}, headers=validator).status_code, 422)

    def test_delivered_order_cannot_be_cancelled(self):
        order = self.place([(self.honey, 3)]).json()
        url = f"/api/orders/{order['id']}/status"

        _, validator = self.register("auditor", role="validator")
        self.assertEqual(self.client.patch(url, json={"status": "delivered"}, headers=validator).status_code, 200)

        response = self.client.patch(url, json={"status": "cancelled"}, headers=self.headers)
        self.assertEqual(response.status_code, 409)
        honey = self.client.get(f"/api/products/{self.honey['id']}").json()
        self.assertEqual(honey["stock_quantity"], 0)
        self.assertFalse(honey["in_stock"])


if __name__ == "__main__":
    unittest.main()
