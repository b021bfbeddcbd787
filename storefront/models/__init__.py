from storefront.models.storage_entry import StorageEntry

# add ALL models here
