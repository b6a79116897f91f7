from locust import HttpUser, task, between
import random

SIGN_UP = "mutation($email: String!, $password: String!) { signUp(email: $email, password: $password) }"
ADD_TO_CART = """
mutation($products: [String!]!, $totalPrice: Float!) {
  addToCart(products: $products, totalPrice: $totalPrice) { id }
}
"""


class ApiUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Sign up a fresh account for this simulated client
        email = f"user_{random.randint(1, 1_000_000_000)}@load.test"
        r = self.client.post("/graphql", json={"query": SIGN_UP, "variables": {"email": email, "password": "pw"}})
        data = r.json().get("data") if r.status_code == 200 else None
        self.token = data["signUp"] if data else None

    def graphql(self, query, variables=None, name=None):
        headers = {"authorization": self.token} if self.token else {}
        return self.client.post(
            "/graphql", json={"query": query, "variables": variables or {}}, headers=headers, name=name
        )

    @task(3)
    def add_to_cart(self):
        if not self.token:
            return
        products = [str(random.randint(1, 50)) for _ in range(random.randint(1, 4))]
        total = round(random.random() * 100, 2)
        self.graphql(ADD_TO_CART, {"products": products, "totalPrice": total}, name="addToCart")

    @task(2)
    def list_products(self):
        self.graphql("{ products { id name price } }", name="products")

    @task(1)
    def order_history(self):
        if not self.token:
            return
        self.graphql("{ orderHistory { id totalPrice } }", name="orderHistory")
