import unittest

from api_case import ApiTestCase


class AuthApiTest(ApiTestCase):
    def test_register_returns_user_and_token(self):
        user, headers = self.register("maria")
        self.assertEqual(user["username"], "maria")
        self.assertEqual(user["role"], "consumer")
        self.assertNotIn("hashed_password", user)

        response = self.client.get("/api/users/me", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["email"], "maria@example.com")

    def test_register_duplicate(self):
        self.register("maria")
        response = self.client.post(
            "/api/auth/register",
            json={
                "username": "maria",
                "email": "other@example.com",
                "full_name": "Maria",
                "password": self.password,
            },
        )
        self.assertEqual(response.status_code, 400)

    def test_register_rejects_unknown_role(self):
        response = self.client.post(
            "/api/auth/register",
            json={
                "username": "root",
                "email": "root@example.com",
                "full_name": "Root",
                "password": self.password,
                "role": "admin",
            },
        )
        self.assertEqual(response.status_code, 422)

    def test_login_by_username_or_email(self):
        self.register("maria")
        for login in ("maria", "maria@example.com"):
            with self.subTest(login=login):
                response = self.client.post(
                    "/api/auth/login", data={"username": login, "password": self.password}
                )
                self.assertEqual(response.status_code, 200)
                self.assertEqual(response.json()["user"]["username"], "maria")
                self.assertEqual(response.json()["token_type"], "bearer")

    def test_login_wrong_password(self):
        self.register("maria")
        response = self.client.post("/api/auth/login", data={"username": "maria", "password": "nope123"})
        self.assertEqual(response.status_code, 401)

    def test_token_endpoint(self):
        self.register("maria")
        response = self.client.post("/api/auth/token", data={"username": "maria", "password": self.password})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(set(response.json()), {"access_token", "token_type"})

    def test_protected_route_requires_token(self):
        self.assertEqual(self.client.get("/api/users/me").status_code, 401)
        response = self.client.get("/api/users/me", headers={"Authorization": "Bearer garbage"})
        self.assertEqual(response.status_code, 401)

    def test_update_profile_and_password(self):
        _, headers = self.register("maria")
        response = self.client.put(
            "/api/users/me",
            json={"location": "Riobamba", "password": "newsecret"},
            headers=headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["location"], "Riobamba")

        response = self.client.post("/api/auth/token", data={"username": "maria", "password": "newsecret"})
        self.assertEqual(response.status_code, 200)

    def test_update_profile_rejects_null_required_fields(self):
        _, headers = self.register("maria")
        for field in ("full_name", "email", "password"):
            response = self.client.put("/api/users/me", json={field: None}, headers=headers)
            self.assertEqual(response.status_code, 422, field)

        response = self.client.put("/api/users/me", json={"phone": None}, headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["phone"])


if __name__ == "__main__":
    unittest.main()
