import core.models
import core.validators
import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('full_name', models.CharField(blank=True, default='', help_text='Display name of the user.', max_length=150, verbose_name='full name')),
                ('phone', models.CharField(blank=True, default='', help_text='Optional. Enter phone number in international format.', max_length=20, validators=[core.validators.validate_phone_number], verbose_name='phone')),
                ('address', models.CharField(blank=True, default='', help_text='Default postal address.', max_length=300, verbose_name='address')),
                ('service_type', models.CharField(blank=True, default='', help_text='Kind of service offered, for users acting as providers.', max_length=100, verbose_name='service type')),
                ('role', models.CharField(choices=[('USER', 'User'), ('ADMIN', 'Administrator')], default='USER', help_text='Authorization role of the account.', max_length=10, verbose_name='role')),
                ('is_available', models.BooleanField(default=True, help_text='Whether the user is currently available to take work.', verbose_name='available')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when the account was created.', verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when the account was last updated.', verbose_name='updated at')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['role'], name='core_user_role_73872d_idx'),
                    models.Index(fields=['is_available'], name='core_user_is_avai_058671_idx'),
                ],
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Name of the product or service', max_length=200, verbose_name='name')),
                ('description', models.TextField(blank=True, default='', help_text='Detailed description', verbose_name='description')),
                ('price', models.DecimalField(decimal_places=2, help_text='Current unit price', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'), message='Price cannot be negative.')], verbose_name='price')),
                ('stock', models.PositiveIntegerField(blank=True, help_text='Units available. Empty for services, which do not track stock.', null=True, verbose_name='stock')),
                ('category', models.CharField(blank=True, default='', help_text='Catalog category slug', max_length=50, validators=[core.validators.validate_category], verbose_name='category')),
                ('item_type', models.CharField(choices=[('PRODUCT', 'Product'), ('SERVICE', 'Service')], default='PRODUCT', help_text='Whether this is a tangible product or a service', max_length=10, verbose_name='item type')),
                ('image', models.ImageField(blank=True, help_text='Optional. Catalog picture (max 5MB, formats: jpg, png, webp).', null=True, upload_to=core.models.product_image_upload_path, validators=[core.validators.validate_product_image], verbose_name='image')),
                ('is_available', models.BooleanField(default=True, help_text='Whether the item can currently be ordered', verbose_name='available')),
                ('rating_average', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Average review rating from 0.00 to 5.00', max_digits=3, verbose_name='rating average')),
                ('total_reviews', models.PositiveIntegerField(default=0, help_text='Total number of reviews received', verbose_name='total reviews')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when the item was created', verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when the item was last updated', verbose_name='updated at')),
                ('provider', models.ForeignKey(blank=True, help_text='Provider offering this service', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='services', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'product',
                'verbose_name_plural': 'products',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['category'], name='core_produc_categor_ba410e_idx'),
                    models.Index(fields=['item_type'], name='core_produc_item_ty_85c7c4_idx'),
                    models.Index(fields=['is_available'], name='core_produc_is_avai_324978_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('price__gte', 0)), name='product_price_non_negative'),
                    models.CheckConstraint(condition=models.Q(('stock__isnull', True), ('stock__gte', 0), _connector='OR'), name='product_stock_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(help_text='Number of units ordered', validators=[django.core.validators.MinValueValidator(1, message='Quantity must be at least 1.')], verbose_name='quantity')),
                ('price', models.DecimalField(decimal_places=2, help_text='Unit price at the time of ordering', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'), message='Price cannot be negative.')], verbose_name='unit price')),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Quantity multiplied by unit price', max_digits=12, verbose_name='total amount')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('CONFIRMED', 'Confirmed'), ('SHIPPED', 'Shipped'), ('DELIVERED', 'Delivered'), ('CANCELLED', 'Cancelled')], default='PENDING', help_text='Current status of the order', max_length=20, verbose_name='status')),
                ('shipping_address', models.CharField(blank=True, default='', help_text='Address to deliver to', max_length=300, verbose_name='shipping address')),
                ('payment_method', models.CharField(blank=True, default='', help_text='Payment method chosen by the buyer', max_length=50, verbose_name='payment method')),
                ('notes', models.TextField(blank=True, default='', help_text='Free-text notes from the buyer', verbose_name='notes')),
                ('order_date', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when the order was placed', verbose_name='order date')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when the order was last updated', verbose_name='updated at')),
                ('product', models.ForeignKey(help_text='Product or service being ordered', on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='core.product')),
                ('user', models.ForeignKey(help_text='User who placed the order', on_delete=django.db.models.deletion.PROTECT, related_name='orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'order',
                'verbose_name_plural': 'orders',
                'ordering': ['-order_date'],
                'indexes': [
                    models.Index(fields=['user'], name='core_order_user_id_f84106_idx'),
                    models.Index(fields=['product'], name='core_order_product_1f8256_idx'),
                    models.Index(fields=['status'], name='core_order_status_6fe5d5_idx'),
                    models.Index(fields=['order_date'], name='core_order_order_d_278c74_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity__gt', 0)), name='order_quantity_positive'),
                    models.CheckConstraint(condition=models.Q(('price__gte', 0)), name='order_price_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Review',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rating', models.PositiveSmallIntegerField(help_text='Rating from 1 to 5 stars', validators=[django.core.validators.MinValueValidator(1, message='Rating must be at least 1.'), django.core.validators.MaxValueValidator(5, message='Rating must be at most 5.')], verbose_name='rating')),
                ('comment', models.TextField(blank=True, default='', help_text='Written feedback about the item', max_length=1000, verbose_name='comment')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when the review was created', verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when the review was last updated', verbose_name='updated at')),
                ('product', models.ForeignKey(help_text='Product or service being reviewed', on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to='core.product')),
                ('user', models.ForeignKey(help_text='User writing the review', on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'review',
                'verbose_name_plural': 'reviews',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user'], name='core_review_user_id_f4ca32_idx'),
                    models.Index(fields=['product'], name='core_review_product_99ff2a_idx'),
                    models.Index(fields=['rating'], name='core_review_rating_41e437_idx'),
                    models.Index(fields=['created_at'], name='core_review_created_25a366_idx'),
                ],
            },
        ),
    ]
