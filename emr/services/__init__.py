# Services package.
#
# A single generic ``EntityService`` implements CRUD, projection,
# filtering, sorting and pagination for every entity.  ``ENTITY_SERVICES``
# maps the public route name of each exposed entity to its service:
#
#   currency, comorbidity, uom, generic, productcategory, product,
#   patient, visit, dayvisit, invoice, invoiceline
#
# All service methods accept an AsyncSession as their first argument so
# that the router layer controls the transaction boundary via ``get_db``.
from emr import models, schemas
from emr.services.entity_service import EntityService

currency_service = EntityService(models.Currency, schemas.CurrencySchema)
comorbidity_service = EntityService(models.Comorbidity, schemas.ComorbiditySchema)
uom_service = EntityService(models.Uom, schemas.UomSchema)
generic_service = EntityService(models.Generic, schemas.GenericSchema)
product_category_service = EntityService(models.ProductCategory, schemas.ProductCategorySchema)
product_service = EntityService(models.Product, schemas.ProductSchema)
patient_service = EntityService(models.Patient, schemas.PatientSchema)
visit_service = EntityService(models.Visit, schemas.VisitSchema)
day_visit_service = EntityService(models.DayVisit, schemas.DayVisitSchema)
invoice_service = EntityService(models.Invoice, schemas.InvoiceSchema)
invoice_line_service = EntityService(models.InvoiceLine, schemas.InvoiceLineSchema)

ENTITY_SERVICES: dict[str, EntityService] = {
    service.name: service
    for service in (
        currency_service,
        comorbidity_service,
        uom_service,
        generic_service,
        product_category_service,
        product_service,
        patient_service,
        visit_service,
        day_visit_service,
        invoice_service,
        invoice_line_service,
    )
}

__all__ = ["ENTITY_SERVICES", "EntityService"]
