import os
import sys
import django
import random
from decimal import Decimal
from faker import Faker

# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set up Django environment
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'marketplace_backend.settings')
django.setup()

from core.exceptions import MarketplaceError
from core.models import User, Product, Order, Review
from core.services import OrderLifecycleManager

fake = Faker()

CATALOG = {
    'cricket': ["Pro Cricket Bat", "Cricket Batting Gloves", "Cricket Helmet", "Cricket Ball Set"],
    'football': ["Professional Football", "Football Cleats", "Goalkeeper Gloves", "Football Training Cones"],
    'indoor-games': ["Table Tennis Set", "Chess Set", "Carrom Board", "Dart Board Set"],
    'gym': ["Adjustable Dumbbells", "Yoga Mat", "Resistance Bands Set", "Kettlebell"],
}

SERVICE_NAMES = [
    "Personal Training Session", "Cricket Coaching", "Racket Restringing",
    "Equipment Repair", "Football Pitch Booking",
]


def create_users(num_users=10, num_providers=5):
    print(f"Creating {num_users} users, {num_providers} providers and one administrator...")

    users = []
    providers = []

    for _ in range(num_users):
        username = fake.unique.user_name()
        user = User.objects.create_user(
            username=username,
            email=fake.unique.email(),
            password='password123',
            full_name=fake.name(),
            address=fake.address().replace('\n', ', ')[:300],
        )
        users.append(user)

    for _ in range(num_providers):
        username = fake.unique.user_name()
        user = User.objects.create_user(
            username=username,
            email=fake.unique.email(),
            password='password123',
            full_name=fake.name(),
            service_type=random.choice(SERVICE_NAMES),
            is_available=random.choice([True, False]),
        )
        providers.append(user)

    if not User.objects.filter(username='admin').exists():
        User.objects.create_superuser(
            username='admin',
            email='admin@example.com',
            password='admin12345',
            role=User.ROLE_ADMIN,
        )

    print(f"Created {len(users)} users and {len(providers)} providers.")
    return users, providers


def create_products():
    print("Creating products...")
    products = []

    for category, names in CATALOG.items():
        for name in names:
            product = Product.objects.create(
                name=name,
                description=fake.sentence(nb_words=12),
                price=Decimal(random.randrange(499, 24999)) / 100,
                stock=random.randint(0, 50),
                category=category,
                item_type=Product.TYPE_PRODUCT,
            )
            products.append(product)

    print(f"Created {len(products)} products.")
    return products


def create_services(providers):
    print("Creating services...")
    services = []

    for provider in providers:
        service = Product.objects.create(
            name=provider.service_type or random.choice(SERVICE_NAMES),
            description=fake.paragraph(nb_sentences=3),
            price=Decimal(random.randrange(1000, 10000)) / 100,
            stock=None,
            category=random.choice(list(CATALOG)),
            item_type=Product.TYPE_SERVICE,
            provider=provider,
            is_available=provider.is_available,
        )
        services.append(service)

    print(f"Created {len(services)} services.")
    return services


def create_orders(users, items):
    print("Placing orders...")
    manager = OrderLifecycleManager()
    orders = []
    rejected = 0

    for user in users:
        for _ in range(random.randint(1, 4)):
            item = random.choice(items)
            try:
                order = manager.create_order(
                    user_id=user.id,
                    product_id=item.id,
                    quantity=random.randint(1, 5),
                    shipping_address=user.address,
                    payment_method=random.choice(['CARD', 'UPI', 'CASH_ON_DELIVERY']),
                )
            except MarketplaceError as e:
                # Out-of-stock and unavailable items are expected in random data
                rejected += 1
                print(f"  Skipped order: {e.message}")
                continue

            # Walk some orders further along the lifecycle
            path = random.choice([
                [],
                [Order.STATUS_CONFIRMED],
                [Order.STATUS_CONFIRMED, Order.STATUS_SHIPPED],
                [Order.STATUS_CONFIRMED, Order.STATUS_SHIPPED, Order.STATUS_DELIVERED],
                [Order.STATUS_CANCELLED],
            ])
            for next_status in path:
                order = manager.update_order_status(order.id, next_status)

            orders.append(order)

    print(f"Created {len(orders)} orders ({rejected} rejected).")
    return orders


def create_reviews(orders):
    print("Creating reviews...")
    reviews = []

    for order in orders:
        if order.status != Order.STATUS_DELIVERED:
            continue
        if random.random() > 0.7:
            continue

        review = Review.objects.create(
            user=order.user,
            product=order.product,
            rating=random.randint(1, 5),
            comment=fake.paragraph(nb_sentences=2)[:1000],
        )
        reviews.append(review)

    print(f"Created {len(reviews)} reviews.")
    return reviews


def main():
    print("Starting database population...")

    users, providers = create_users(num_users=20, num_providers=8)

    products = create_products()
    services = create_services(providers)

    orders = create_orders(users, products + [s for s in services if s.is_available])

    create_reviews(orders)

    print("Database population completed successfully!")


if __name__ == '__main__':
    main()
