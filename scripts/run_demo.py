#!/usr/bin/env python3
"""
run_demo.py - End-to-end demo against a running order service
- Registers a customer
- Creates two products
- Places an order (stock is reserved)
- Tries to oversell the remaining stock (409)
- Confirms the first order, cancels a second one
- Lists the customer's orders
"""

import json
import os
from typing import Any, Dict, List, Optional

import httpx


class DemoRunner:
    def __init__(self):
        self.base_url = os.getenv("ORDERS_URL", "http://localhost:8000")
        self.api_url = f"{self.base_url}/api/v1"
        self.client = httpx.Client(timeout=30)

    # ---------- helpers ----------
    def show_step(self, title: str):
        print(f"\n=== {title} ===")

    def call_api(
        self,
        method: str,
        url: str,
        data: Optional[Any] = None,
        expected_status: List[int] = [200, 201],
    ) -> Dict[str, Any]:
        print(f"\n-> {method} {url}")
        if data is not None:
            print(f"   Body: {json.dumps(data, indent=2)}")
        try:
            resp = self.client.request(method, url, json=data)
        except httpx.HTTPError as e:
            print(f"   Error: \033[91m{e}\033[0m")
            return {"status": None, "data": None, "error": str(e)}

        status_color = "\033[92m" if resp.status_code in expected_status else "\033[93m"
        print(f"   Status: {status_color}{resp.status_code}\033[0m")
        try:
            js = resp.json()
        except ValueError:
            return {"status": resp.status_code, "data": None}
        print(json.dumps(js, indent=2))
        return {"status": resp.status_code, "data": js}

    # ---------- flow ----------
    def run_demo(self):
        print("Starting order service demo")
        print("=" * 50)

        self.show_step("Preflight: health")
        health = self.call_api("GET", f"{self.base_url}/health")
        if health.get("status") != 200:
            print("Service is not reachable, aborting.")
            return

        self.show_step("Customer: register")
        user = self.call_api(
            "POST",
            f"{self.api_url}/users",
            data={"first_name": "Ada", "last_name": "Lovelace", "age": 36, "password": "analytical"},
        )["data"]

        self.show_step("Catalog: create products")
        keyboard = self.call_api(
            "POST",
            f"{self.api_url}/products",
            data={"description": "Mechanical keyboard", "tags": ["hardware"], "quantity": 3, "price": 8999},
        )["data"]
        mouse = self.call_api(
            "POST",
            f"{self.api_url}/products",
            data={"description": "Wireless mouse", "tags": ["hardware"], "quantity": 10, "price": 2999},
        )["data"]

        self.show_step("Customer: place order")
        items = sorted(
            [{"product_id": keyboard["id"], "quantity": 2}, {"product_id": mouse["id"], "quantity": 1}],
            key=lambda it: it["product_id"],
        )
        order = self.call_api("POST", f"{self.api_url}/orders", data={"user_id": user["id"], "items": items})["data"]
        self.call_api("GET", f"{self.api_url}/products/{keyboard['id']}")

        self.show_step("Customer: oversell attempt (expect 409)")
        self.call_api(
            "POST",
            f"{self.api_url}/orders",
            data={"user_id": user["id"], "items": [{"product_id": keyboard["id"], "quantity": 2}]},
            expected_status=[409],
        )

        self.show_step("Order: confirm")
        self.call_api("PATCH", f"{self.api_url}/orders/{order['id']}/confirm")

        self.show_step("Order: place and cancel a second order")
        second = self.call_api(
            "POST",
            f"{self.api_url}/orders",
            data={"user_id": user["id"], "items": [{"product_id": mouse["id"], "quantity": 1}]},
        )["data"]
        self.call_api("PATCH", f"{self.api_url}/orders/{second['id']}/cancel")

        self.show_step("Customer: list orders")
        self.call_api("GET", f"{self.api_url}/users/{user['id']}/orders")

        print("\nDemo complete.")


if __name__ == "__main__":
    DemoRunner().run_demo()
