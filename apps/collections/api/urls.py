from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    CollectionViewSet,
    StorefrontCollectionViewSet,
    CronRegenerateCollectionsView,
)

router = DefaultRouter()
router.register(r'collections', CollectionViewSet, basename='collection')
router.register(r'storefront/collections', StorefrontCollectionViewSet, basename='storefront-collection')

urlpatterns = [
    path(
        'cron/regenerate-collections/',
        CronRegenerateCollectionsView.as_view(),
        name='cron-regenerate-collections'
    ),
    path('', include(router.urls)),
]
