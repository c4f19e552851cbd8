from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class Product(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(0)]
    )
    img_url = models.TextField(blank=True, default="")
    date = models.DateTimeField(default=timezone.now)
    categories = models.ManyToManyField(
        Category, related_name="products", through="ProductCategory"
    )

    def __str__(self):
        return self.name

    class Meta:
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
        ]


class ProductCategory(models.Model):
    # Row id records the order in which categories were attached.
    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="category_links"
    )
    category = models.ForeignKey(
        Category, on_delete=models.PROTECT, related_name="product_links"
    )

    class Meta:
        db_table = "product_categories"
        constraints = [
            models.UniqueConstraint(
                fields=["product", "category"], name="unique_product_category"
            ),
        ]
