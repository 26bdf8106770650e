#
# azshortcuts/virtual_machines.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Virtual machines with unmanaged (VHD) OS disks.

A definition needs an admin username and password, a full image
reference (publisher, offer, sku, version) and a size. Everything
else is filled in by create(): the resource group, a storage
account for the OS disk VHD, and a network interface (with the
network, subnet, public IP and network security group it needs).

    vm = sub.virtual_machines.define('myvm') \
            .with_region('westus') \
            .with_admin_username('azureuser') \
            .with_admin_password(password) \
            .with_image_published_by('Canonical') \
            .with_image_offer('UbuntuServer') \
            .with_image_sku('18.04-LTS') \
            .with_latest_image_version() \
            .with_size('Standard_D2s_v3') \
            .create()
'''
import base64

from azure.mgmt.compute.models import (BootDiagnostics,
                                       CachingTypes,
                                       DiagnosticsProfile,
                                       DiskCreateOptionTypes,
                                       HardwareProfile,
                                       ImageReference,
                                       NetworkInterfaceReference,
                                       NetworkProfile,
                                       OSDisk,
                                       OSProfile,
                                       StorageProfile,
                                       SubResource,
                                       VirtualHardDisk,
                                       VirtualMachine as VirtualMachineModel,
                                       VirtualMachineUpdate,
                                      )

from azshortcuts.base_defaults import (COMPUTER_NAME_MAX_LEN,
                                       NAME_PREFIX_STORAGE,
                                       NAME_PREFIX_VHD,
                                       NAME_SUFFIX_NIC,
                                       OS_DISK_NAME_DEFAULT,
                                      )
from azshortcuts.entities import (GroupableCollection,
                                  GroupableResourceBase,
                                  NetworkAttachable,
                                  id_of,
                                  name_of,
                                 )
from azshortcuts.exceptions import ResourceNotFound
from azshortcuts.util import (name_with_prefix,
                              name_with_suffix,
                             )

LATEST = 'latest'

def vhd_uri(blob_endpoint, name):
    '''
    Return the URI of the OS disk VHD for the VM named name:
    <blob endpoint>vhd<name>/vhd<name>.vhd
    '''
    if not blob_endpoint.endswith('/'):
        blob_endpoint += '/'
    vhd_name = name_with_prefix(NAME_PREFIX_VHD, name)
    return f"{blob_endpoint}{vhd_name}/{vhd_name}.vhd"

class VirtualMachine(NetworkAttachable, GroupableResourceBase):
    '''
    Wraps azure.mgmt.compute.models.VirtualMachine
    '''
    RESOURCE_TYPE_DESC = 'virtual machine'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._network_init()
        self._storage_create = True
        self._storage_ref = None
        self._nic_ref = None

    ######################################################################
    # Getters

    @property
    def size(self):
        hardware_profile = self._inner.hardware_profile
        return hardware_profile.vm_size if hardware_profile else None

    def _boot_diagnostics(self):
        diagnostics_profile = self._inner.diagnostics_profile
        return diagnostics_profile.boot_diagnostics if diagnostics_profile else None

    @property
    def boot_diagnostics_storage(self):
        boot_diagnostics = self._boot_diagnostics()
        return boot_diagnostics.storage_uri if boot_diagnostics else None

    @property
    def is_boot_diagnostics_enabled(self):
        boot_diagnostics = self._boot_diagnostics()
        return bool(boot_diagnostics and boot_diagnostics.enabled)

    @property
    def availability_set(self):
        '''
        Getter: availability set id or None
        '''
        availability_set = self._inner.availability_set
        return availability_set.id if availability_set else None

    @property
    def extensions(self):
        return list(self._inner.resources or list())

    @property
    def instance_view(self):
        return self._inner.instance_view

    @property
    def platform_fault_domain(self):
        return getattr(self.instance_view, 'platform_fault_domain', None)

    @property
    def platform_update_domain(self):
        return getattr(self.instance_view, 'platform_update_domain', None)

    @property
    def remote_desktop_thumbprint(self):
        return getattr(self.instance_view, 'rdp_thumb_print', None)

    @property
    def vm_agent_version(self):
        vm_agent = getattr(self.instance_view, 'vm_agent', None)
        return vm_agent.vm_agent_version if vm_agent else None

    @property
    def network_interface_ids(self):
        network_profile = self._inner.network_profile
        if not network_profile:
            return list()
        return [x.id for x in network_profile.network_interfaces or list()]

    @property
    def admin_username(self):
        os_profile = self._inner.os_profile
        return os_profile.admin_username if os_profile else None

    @property
    def computer_name(self):
        os_profile = self._inner.os_profile
        return os_profile.computer_name if os_profile else None

    @property
    def custom_data(self):
        '''
        Getter: custom data as sent to Azure (base64). Azure does not return it on reads.
        '''
        os_profile = self._inner.os_profile
        return os_profile.custom_data if os_profile else None

    def _os_type(self):
        storage_profile = self._inner.storage_profile
        os_disk = storage_profile.os_disk if storage_profile else None
        return str(os_disk.os_type).lower() if (os_disk and os_disk.os_type) else ''

    @property
    def is_linux(self):
        os_profile = self._inner.os_profile
        if os_profile and os_profile.linux_configuration is not None:
            return True
        return self._os_type().endswith('linux')

    @property
    def is_windows(self):
        os_profile = self._inner.os_profile
        if os_profile and os_profile.windows_configuration is not None:
            return True
        return self._os_type().endswith('windows')

    @property
    def image(self):
        '''
        Getter: SDK ImageReference
        '''
        storage_profile = self._inner.storage_profile
        return storage_profile.image_reference if storage_profile else None

    @property
    def data_disks(self):
        storage_profile = self._inner.storage_profile
        return list(storage_profile.data_disks or list()) if storage_profile else list()

    ######################################################################
    # Setters

    def _os_profile(self):
        if self._inner.os_profile is None:
            self._inner.os_profile = OSProfile()
        return self._inner.os_profile

    def _image_reference(self):
        if self._inner.storage_profile is None:
            self._inner.storage_profile = StorageProfile()
        if self._inner.storage_profile.image_reference is None:
            self._inner.storage_profile.image_reference = ImageReference()
        return self._inner.storage_profile.image_reference

    def with_admin_username(self, username):
        self._os_profile().admin_username = username
        return self

    def with_admin_password(self, password):
        self._os_profile().admin_password = password
        return self

    def with_image_published_by(self, publisher):
        '''
        publisher is a name or a compute_catalog.Publisher
        '''
        self._image_reference().publisher = name_of(publisher)
        return self

    def with_image_offer(self, offer):
        self._image_reference().offer = name_of(offer)
        return self

    def with_image_sku(self, sku):
        self._image_reference().sku = name_of(sku)
        return self

    def with_image_version(self, version):
        self._image_reference().version = version
        return self

    def with_latest_image_version(self):
        return self.with_image_version(LATEST)

    def with_availability_set(self, availability_set):
        '''
        availability_set is an id, an AvailabilitySet, or an SDK model
        '''
        availability_set_id = id_of(availability_set)
        self._inner.availability_set = SubResource(id=availability_set_id) if availability_set_id else None
        return self

    def with_size(self, size):
        '''
        size is a name (eg Standard_D2s_v3) or a compute_catalog.Size
        '''
        if self._inner.hardware_profile is None:
            self._inner.hardware_profile = HardwareProfile()
        self._inner.hardware_profile.vm_size = name_of(size)
        return self

    def with_computer_name(self, computer_name):
        if len(computer_name) > COMPUTER_NAME_MAX_LEN:
            raise ValueError("computer name %r is longer than %d characters" % (computer_name, COMPUTER_NAME_MAX_LEN))
        self._os_profile().computer_name = computer_name
        return self

    def with_custom_data(self, custom_data):
        '''
        custom_data is str or bytes; it is base64-encoded here
        '''
        if isinstance(custom_data, str):
            custom_data = custom_data.encode('utf-8')
        self._os_profile().custom_data = base64.b64encode(custom_data).decode('ascii')
        return self

    def with_boot_diagnostics(self, storage_uri):
        self._inner.diagnostics_profile = DiagnosticsProfile(boot_diagnostics=BootDiagnostics(enabled=True, storage_uri=storage_uri))
        return self

    def without_boot_diagnostics(self):
        self._inner.diagnostics_profile = DiagnosticsProfile(boot_diagnostics=BootDiagnostics(enabled=False))
        return self

    def with_existing_storage_account(self, storage_account):
        '''
        storage_account is a name, an id, or a StorageAccount
        '''
        self._storage_create = False
        self._storage_ref = storage_account if isinstance(storage_account, str) else storage_account.id
        return self

    def with_new_storage_account(self, name=None):
        '''
        The account is named store<vm name> unless name is given
        '''
        self._storage_create = True
        self._storage_ref = name
        return self

    def with_existing_network_interface(self, nic):
        '''
        nic is an id, a NetworkInterface, or an SDK model.
        The network and public IP setters are then ignored.
        '''
        self._nic_ref = id_of(nic)
        return self

    ######################################################################
    # create() support

    def _definition_missing(self):
        image = self.image
        os_profile = self._inner.os_profile
        checks = (('admin username', os_profile and os_profile.admin_username),
                  ('admin password', os_profile and os_profile.admin_password),
                  ('image publisher', image and image.publisher),
                  ('image offer', image and image.offer),
                  ('image sku', image and image.sku),
                  ('image version', image and image.version),
                  ('size', self.size),
                 )
        return [desc for desc, value in checks if not value]

    def ensure_storage_account(self, group_name):
        '''
        Return the StorageAccount that holds the OS disk VHD,
        creating it if necessary.
        '''
        storage_accounts = self.subscription.storage_accounts
        if self._storage_create:
            name = self._storage_ref or name_with_prefix(NAME_PREFIX_STORAGE, self.name).lower()
            storage_account = storage_accounts.define(name) \
                    .with_region(self.region) \
                    .with_existing_resource_group(group_name) \
                    .create()
            self._storage_create = False
            self._storage_ref = storage_account.id
            return storage_account
        ref = self._storage_ref
        if ref.startswith('/'):
            storage_account = storage_accounts.get(ref)
        else:
            storage_account = storage_accounts.get(group_name, ref)
            if storage_account is None:
                # Account names are unique across Azure, so the group need not match
                storage_account = storage_accounts.as_map().get(ref, None)
        if storage_account is None:
            raise ResourceNotFound("storage account %r not found" % ref)
        return storage_account

    def ensure_network_interface(self, group_name):
        '''
        Return the id of the primary NIC, creating it if necessary
        with the network and public IP settings of this definition.
        '''
        if self._nic_ref:
            return self._nic_ref
        definition = self.subscription.network_interfaces.define(name_with_suffix(self.name, NAME_SUFFIX_NIC)) \
                .with_region(self.region) \
                .with_existing_resource_group(group_name)
        self.network_settings_copy_to(definition)
        nic = definition.create()
        self._nic_ref = nic.id
        return self._nic_ref

    def _create_do(self, group_name):
        storage_account = self.ensure_storage_account(group_name)
        blob_endpoint = storage_account.primary_blob_endpoint
        if not blob_endpoint:
            raise ResourceNotFound("storage account %r has no blob endpoint" % storage_account.name)
        self._inner.storage_profile.os_disk = OSDisk(name=OS_DISK_NAME_DEFAULT,
                                                     vhd=VirtualHardDisk(uri=vhd_uri(blob_endpoint, self.name)),
                                                     caching=CachingTypes.NONE,
                                                     create_option=DiskCreateOptionTypes.FROM_IMAGE)
        if not self.computer_name:
            self._os_profile().computer_name = self.name[:COMPUTER_NAME_MAX_LEN]
        nic_id = self.ensure_network_interface(group_name)
        self._inner.network_profile = NetworkProfile(network_interfaces=[NetworkInterfaceReference(id=nic_id, primary=True)])
        az_compute = self.subscription._az_compute_client
        return self.subscription.lro('compute.virtual_machines.create_or_update', az_compute.virtual_machines.begin_create_or_update, group_name, self.name, self._inner)

    def _apply_do(self):
        '''
        Push tags and size
        '''
        parameters = VirtualMachineUpdate(tags=self.tags)
        if self.size:
            parameters.hardware_profile = HardwareProfile(vm_size=self.size)
        az_compute = self.subscription._az_compute_client
        return self.subscription.lro('compute.virtual_machines.update', az_compute.virtual_machines.begin_update, self.resource_group, self.name, parameters)

class VirtualMachines(GroupableCollection):
    '''
    Virtual machines within a subscription
    '''
    WRAPPER_CLASS = VirtualMachine
    AZRID_VALUES = {'provider_name' : 'Microsoft.Compute',
                    'resource_type' : 'virtualMachines',
                   }

    def inner_list(self, group_name=None):
        az_compute = self._subscription._az_compute_client
        if group_name:
            return self._subscription._cw_list(az_compute.virtual_machines.list, group_name)
        return self._subscription._cw_list(az_compute.virtual_machines.list_all)

    def inner_get(self, group_name, name):
        az_compute = self._subscription._az_compute_client
        return self._subscription._cw_get(az_compute.virtual_machines.get, group_name, name, expand='instanceView')

    def _inner_new(self, name):
        return VirtualMachineModel(location=None,
                                   tags=dict(),
                                   hardware_profile=HardwareProfile(),
                                   os_profile=OSProfile(),
                                   storage_profile=StorageProfile(image_reference=ImageReference(), data_disks=list()))

    def inner_delete(self, group_name, name):
        az_compute = self._subscription._az_compute_client
        self._subscription.lro('compute.virtual_machines.delete', az_compute.virtual_machines.begin_delete, group_name, name)
