"""Populate the EMR database with reference data, patients, visits and invoices."""
import asyncio
import argparse
import random
import time
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from emr.database import engine, async_session, Base
from emr.models import (
    Comorbidity,
    Currency,
    DayVisit,
    Generic,
    Invoice,
    InvoiceLine,
    Patient,
    Product,
    ProductCategory,
    Uom,
    Visit,
)

CURRENCIES = [("INR", "Indian Rupee", "₹"), ("USD", "US Dollar", "$"), ("EUR", "Euro", "€")]
COMORBIDITIES = ["Hypertension", "Type 2 Diabetes", "Asthma", "COPD", "Hypothyroidism", "Obesity"]
CATEGORIES = ["Analgesics", "Antibiotics", "Antihypertensives", "Consumables"]
UOMS = [("TAB", "Tablet"), ("ML", "Millilitre"), ("EA", "Each")]
GENERICS = ["Paracetamol", "Amoxicillin", "Metformin", "Amlodipine", "Salbutamol", "Levothyroxine"]
FIRST_NAMES = ["Asha", "Ravi", "Meera", "John", "Fatima", "Chen", "Lucia", "Omar", "Priya", "Sam"]
LAST_NAMES = ["Sharma", "Iyer", "Smith", "Khan", "Wong", "Garcia", "Patel", "Nair", "Brown"]
VISIT_TYPES = ["OPD", "Follow-up", "Emergency", "Teleconsult"]


async def seed(small: bool = False):
    num_patients = 20 if small else 500
    num_products = 20 if small else 200
    visits_per_patient = 2 if small else 4

    print(f"Seeding: {num_patients} patients, {num_products} products, ~{num_patients * visits_per_patient} visits")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        now = datetime.now(timezone.utc)

        currencies = [
            Currency(code=code, name=name, symbol=symbol, is_default=(i == 0), created_on=now)
            for i, (code, name, symbol) in enumerate(CURRENCIES)
        ]
        comorbidities = [Comorbidity(name=name, created_on=now) for name in COMORBIDITIES]
        categories = [ProductCategory(name=name, created_on=now) for name in CATEGORIES]
        uoms = [Uom(code=code, name=name, created_on=now) for code, name in UOMS]
        generics = [Generic(item_name=name, created_on=now) for name in GENERICS]
        session.add_all(currencies + comorbidities + categories + uoms + generics)
        await session.flush()
        print(f"  Created {len(currencies) + len(comorbidities) + len(categories) + len(uoms) + len(generics)} reference rows")

        products = []
        for i in range(num_products):
            product = Product(
                name=f"Product {i:04d}",
                code=f"P{i:05d}",
                unit_price=Decimal(random.randint(500, 50000)) / 100,
                is_active=random.random() > 0.05,
                category_id=random.choice(categories).id,
                uom_id=random.choice(uoms).id,
                created_on=now,
            )
            session.add(product)
            products.append(product)
        await session.flush()
        print(f"  Created {len(products)} products")

        patients = []
        for i in range(num_patients):
            patient = Patient(
                first_name=random.choice(FIRST_NAMES),
                last_name=random.choice(LAST_NAMES),
                date_of_birth=date(1950, 1, 1) + timedelta(days=random.randint(0, 25000)),
                gender=random.choice(["F", "M"]),
                email=f"patient_{i:05d}@example.com",
                medical_record_number=f"MRN{i:06d}",
                comorbidity_id=random.choice(comorbidities).id if random.random() > 0.5 else None,
                created_on=now,
            )
            session.add(patient)
            patients.append(patient)
        await session.flush()
        print(f"  Created {len(patients)} patients")

        invoice_count = 0
        for patient in patients:
            for _ in range(random.randint(1, visits_per_patient)):
                visited = now - timedelta(days=random.randint(0, 365))
                visit = Visit(
                    patient_id=patient.id,
                    visit_date=visited,
                    visit_type=random.choice(VISIT_TYPES),
                    status="Closed",
                    created_on=now,
                )
                session.add(visit)
                await session.flush()

                day_visit = DayVisit(
                    patient_id=patient.id,
                    visit_id=visit.id,
                    visit_day=visited.date(),
                    token_number=random.randint(1, 120),
                    status="Completed",
                    created_on=now,
                )
                session.add(day_visit)
                await session.flush()

                invoice_count += 1
                invoice = Invoice(
                    invoice_number=f"INV{invoice_count:07d}",
                    invoice_date=visited.date(),
                    patient_id=patient.id,
                    visit_id=visit.id,
                    day_visit_id=day_visit.id,
                    currency_id=currencies[0].id,
                    status="Paid",
                    created_on=now,
                )
                session.add(invoice)
                await session.flush()

                total = Decimal("0")
                for product in random.sample(products, k=random.randint(1, 4)):
                    quantity = Decimal(random.randint(1, 10))
                    amount = quantity * product.unit_price
                    session.add(
                        InvoiceLine(
                            invoice_id=invoice.id,
                            product_id=product.id,
                            description=product.name,
                            quantity=quantity,
                            unit_price=product.unit_price,
                            amount=amount,
                            created_on=now,
                        )
                    )
                    total += amount
                invoice.total_amount = total
            await session.flush()

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Patients: {num_patients}")
    print(f"  Products: {num_products}")
    print(f"  Invoices: {invoice_count}")


def main():
    parser = argparse.ArgumentParser(description="Seed the EMR database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (20 patients)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
