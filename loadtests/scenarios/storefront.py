"""Storefront load test scenarios.

Stateful SequentialTaskSet journeys over the catalogue and review APIs.
Steps execute in order; a journey interrupts itself when a step it depends
on fails. Write journeys expect the fixture set from
``scripts/seed_catalogue.py``.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    REVIEW_SORTS,
    admin_reply,
    listing_query,
    moderator_id,
    random_customer_id,
    random_product_slug,
    rejection_reason,
    review_data,
    review_edit,
    stock_level,
    stranger_id,
)
from loadtests.helpers.response import error_reason, extract_error_detail
from loadtests.helpers.state import ModerationState, ReviewState, ShopperState


class BrowsingJourney(SequentialTaskSet):
    """List -> Detail -> Variant Selection -> Availability -> Reviews.

    Read-only traffic modelling a shopper narrowing down a product.
    """

    def on_start(self):
        self.state = ShopperState()

    @task
    def list_products(self):
        with self.client.get(
            "/api/products",
            params=listing_query(),
            catch_response=True,
            name="GET /api/products",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List failed: {extract_error_detail(resp)}")
                self.interrupt()
                return
            products = resp.json()["products"]
            self.state.product_slug = random.choice(products)["id"] if products else random_product_slug()

    @task
    def view_product(self):
        with self.client.get(
            f"/api/products/{self.state.product_slug}",
            catch_response=True,
            name="GET /api/products/{slug}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Detail failed: {extract_error_detail(resp)}")
                self.interrupt()
                return
            product = resp.json()["product"]
            self.state.sizes = product["sizes"]
            self.state.colors = [c["value"] for c in product["colors"]]

    @task
    def select_variant(self):
        if not self.state.sizes or not self.state.colors:
            return
        params = {"size": random.choice(self.state.sizes), "color": random.choice(self.state.colors)}
        with self.client.get(
            f"/api/products/{self.state.product_slug}/variants",
            params=params,
            catch_response=True,
            name="GET /api/products/{slug}/variants",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Variants failed: {extract_error_detail(resp)}")
                return
            variants = resp.json()["variants"]
            self.state.selected_sku = variants[0]["sku"] if variants else None

    @task
    def check_availability(self):
        params = {"sku": self.state.selected_sku} if self.state.selected_sku else {}
        with self.client.get(
            f"/api/products/{self.state.product_slug}/availability",
            params=params,
            catch_response=True,
            name="GET /api/products/{slug}/availability",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Availability failed: {extract_error_detail(resp)}")

    @task
    def read_reviews(self):
        params = {"sortBy": random.choice(REVIEW_SORTS), "sortOrder": random.choice(["asc", "desc"])}
        if random.random() < 0.3:
            params["rating"] = random.randint(1, 5)
        with self.client.get(
            f"/api/reviews/product/{self.state.product_slug}",
            params=params,
            catch_response=True,
            name="GET /api/reviews/product/{slug}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Reviews failed: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ReviewerJourney(SequentialTaskSet):
    """Can Review? -> Submit -> Edit -> Mark Another Review Helpful.

    A seeded customer reviews a seeded product. Repeat visits hit the
    one-review-per-product rule, so a 409 on submission counts as success.
    """

    def on_start(self):
        self.state = ReviewState(customer_id=random_customer_id(), product_slug=random_product_slug())

    @task
    def check_eligibility(self):
        with self.client.get(
            f"/api/reviews/can-review/{self.state.product_slug}",
            params={"customerId": self.state.customer_id},
            catch_response=True,
            name="GET /api/reviews/can-review/{slug}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Eligibility failed: {extract_error_detail(resp)}")
                self.interrupt()
                return
            data = resp.json()["data"]
            self.state.can_review = data["canReview"]
            if data.get("existingReview"):
                self.state.review_id = data["existingReview"]["id"]
                self.state.current_status = data["existingReview"]["status"]

    @task
    def submit_review(self):
        if not self.state.can_review:
            return
        with self.client.post(
            "/api/reviews",
            json=review_data(self.state.product_slug, self.state.customer_id),
            catch_response=True,
            name="POST /api/reviews",
        ) as resp:
            if resp.status_code == 201:
                review = resp.json()["data"]["review"]
                self.state.review_id = review["id"]
                self.state.current_status = review["status"]
            elif resp.status_code == 409:
                # Another user instance got there first with the same pair
                resp.success()
            else:
                resp.failure(f"Submit failed: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def edit_review(self):
        if self.state.review_id is None or random.random() < 0.7:
            return
        with self.client.put(
            f"/api/reviews/{self.state.review_id}",
            json={"customerId": self.state.customer_id, **review_edit()},
            catch_response=True,
            name="PUT /api/reviews/{id}",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = resp.json()["data"]["review"]["status"]
            else:
                resp.failure(f"Edit failed: {extract_error_detail(resp)}")

    @task
    def vote_helpful(self):
        with self.client.get(
            f"/api/reviews/product/{self.state.product_slug}",
            catch_response=True,
            name="GET /api/reviews/product/{slug}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Reviews failed: {extract_error_detail(resp)}")
                return
            others = [r["id"] for r in resp.json()["data"]["reviews"] if r["customerId"] != self.state.customer_id]
        if not others:
            return

        with self.client.patch(
            f"/api/reviews/{random.choice(others)}/helpful",
            json={"customerId": self.state.customer_id},
            catch_response=True,
            name="PATCH /api/reviews/{id}/helpful",
        ) as resp:
            if resp.status_code == 409 and error_reason(resp) == "already_marked_helpful":
                resp.success()
            elif resp.status_code != 200:
                resp.failure(f"Helpful vote failed: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class PurchaseGateJourney(SequentialTaskSet):
    """A shopper without a delivered order tries to review; 403 is the expected outcome."""

    @task
    def submit_without_purchase(self):
        with self.client.post(
            "/api/reviews",
            json=review_data(random_product_slug(), stranger_id()),
            catch_response=True,
            name="POST /api/reviews [no purchase]",
        ) as resp:
            if resp.status_code == 403:
                resp.success()
            else:
                resp.failure(f"Expected 403, got {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ModerationJourney(SequentialTaskSet):
    """Pending Queue -> Approve / Reject -> Respond.

    Approvals and rejections recompute the product's rating, so this is the
    write path that contends with reviewers on the same product rows.
    """

    def on_start(self):
        self.state = ModerationState(moderator_id=moderator_id())

    @task
    def fetch_queue(self):
        with self.client.get(
            "/api/reviews/admin/all",
            params={"status": "pending", "limit": 10, "sortOrder": "asc"},
            catch_response=True,
            name="GET /api/reviews/admin/all",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Queue failed: {extract_error_detail(resp)}")
                self.interrupt()
                return
            self.state.pending_ids = [r["id"] for r in resp.json()["data"]["reviews"]]
        if not self.state.pending_ids:
            self.interrupt()

    @task
    def moderate(self):
        for review_id in self.state.pending_ids[:3]:
            if random.random() < 0.8:
                self._approve(review_id)
            else:
                self._reject(review_id)

    def _approve(self, review_id):
        with self.client.patch(
            f"/api/reviews/{review_id}/approve",
            json={"moderatorId": self.state.moderator_id},
            catch_response=True,
            name="PATCH /api/reviews/{id}/approve",
        ) as resp:
            if resp.status_code == 200:
                self.state.approved += 1
            elif resp.status_code == 409:
                # Another moderator already handled it
                resp.success()
            else:
                resp.failure(f"Approve failed: {extract_error_detail(resp)}")

    def _reject(self, review_id):
        with self.client.patch(
            f"/api/reviews/{review_id}/reject",
            json={"moderatorId": self.state.moderator_id, "reason": rejection_reason()},
            catch_response=True,
            name="PATCH /api/reviews/{id}/reject",
        ) as resp:
            if resp.status_code == 200:
                self.state.rejected += 1
            elif resp.status_code in (404, 409):
                resp.success()
            else:
                resp.failure(f"Reject failed: {extract_error_detail(resp)}")

    @task
    def respond(self):
        if not self.state.pending_ids or random.random() < 0.5:
            return
        with self.client.patch(
            f"/api/reviews/{self.state.pending_ids[0]}/respond",
            json={"adminId": self.state.moderator_id, "message": admin_reply()},
            catch_response=True,
            name="PATCH /api/reviews/{id}/respond",
        ) as resp:
            if resp.status_code in (200, 404):
                resp.success()
            else:
                resp.failure(f"Respond failed: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class StockKeeperJourney(SequentialTaskSet):
    """Variants -> Stock Update -> Availability.

    Warehouse sync: picks a variant of a seeded product and overwrites its
    stock level.
    """

    def on_start(self):
        self.state = ShopperState(product_slug=random_product_slug())

    @task
    def load_variants(self):
        with self.client.get(
            f"/api/products/{self.state.product_slug}/variants",
            catch_response=True,
            name="GET /api/products/{slug}/variants",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Variants failed: {extract_error_detail(resp)}")
                self.interrupt()
                return
            variants = resp.json()["variants"]
        if not variants:
            self.interrupt()
        self.state.selected_sku = random.choice(variants)["sku"]

    @task
    def update_stock(self):
        with self.client.patch(
            f"/api/products/{self.state.product_slug}/stock",
            json={"sku": self.state.selected_sku, "stockLevel": stock_level()},
            catch_response=True,
            name="PATCH /api/products/{slug}/stock",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Stock update failed: {extract_error_detail(resp)}")

    @task
    def verify_availability(self):
        with self.client.get(
            f"/api/products/{self.state.product_slug}/availability",
            params={"sku": self.state.selected_sku},
            catch_response=True,
            name="GET /api/products/{slug}/availability",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Availability failed: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    """Read-heavy browsing only."""

    wait_time = between(0.5, 2.0)
    tasks = [BrowsingJourney]


class ReviewerUser(HttpUser):
    wait_time = between(1.0, 3.0)
    tasks = {ReviewerJourney: 9, PurchaseGateJourney: 1}


class ModeratorUser(HttpUser):
    wait_time = between(2.0, 5.0)
    tasks = [ModerationJourney]


class StorefrontMixedUser(HttpUser):
    """Realistic storefront traffic.

    Browsing dominates (70%), reviews are the main write path (20%), and
    moderation and stock sync fill the rest. Rating recomputes from
    moderation land on the same products shoppers are reading.
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        BrowsingJourney: 14,
        ReviewerJourney: 3,
        PurchaseGateJourney: 1,
        ModerationJourney: 1,
        StockKeeperJourney: 1,
    }
