#
# tests/test_compute.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for virtual machines, availability sets, storage accounts,
and the compute catalog
'''
import base64

from azure.core.exceptions import ResourceNotFoundError
from azure.mgmt.compute.models import (AvailabilitySet as AvailabilitySetModel,
                                       HardwareProfile,
                                       SubResource,
                                       VirtualMachine as VirtualMachineModel,
                                       VirtualMachineImageResource,
                                       VirtualMachineInstanceView,
                                       VirtualMachineSize,
                                      )
from azure.mgmt.network.models import (AddressSpace,
                                       NetworkInterface as NetworkInterfaceModel,
                                       NetworkSecurityGroup as NetworkSecurityGroupModel,
                                       PublicIPAddress,
                                       Subnet as SubnetModel,
                                       VirtualNetwork,
                                      )
from azure.mgmt.resource.resources.models import ResourceGroup as ResourceGroupModel
from azure.mgmt.storage.models import (Endpoints,
                                       StorageAccount as StorageAccountModel,
                                      )
import pytest

from azshortcuts.btypes import StorageAccountType
from azshortcuts.exceptions import (DefinitionIncomplete,
                                    ResourceNotFound,
                                   )
from azshortcuts.virtual_machines import vhd_uri

SUB = '11111111-2222-3333-4444-555555555555'

def rid(group_name, provider, resource_type, name):
    return f'/subscriptions/{SUB}/resourceGroups/{group_name}/providers/{provider}/{resource_type}/{name}'

SA_ID = rid('rg1', 'Microsoft.Storage', 'storageAccounts', 'sa1')
VM_ID = rid('rg1', 'Microsoft.Compute', 'virtualMachines', 'vm1')
AS_ID = rid('rg1', 'Microsoft.Compute', 'availabilitySets', 'as1')
VNET_ID = rid('rg1', 'Microsoft.Network', 'virtualNetworks', 'vnet1')
NIC_ID = rid('rg1', 'Microsoft.Network', 'networkInterfaces', 'nic1')
PIP_ID = rid('rg1', 'Microsoft.Network', 'publicIPAddresses', 'pip1')
NSG_ID = rid('rg1', 'Microsoft.Network', 'networkSecurityGroups', 'nsg1')
BLOB_ENDPOINT = 'https://sa1.blob.core.windows.net/'

def lro_args(client_op):
    return client_op.call_args[0]

class ComputeTestBase():
    '''
    Mocked clients with an existing group rg1 and storage account sa1
    '''
    @pytest.fixture(autouse=True)
    def setup_models(self, subscription, sdk_model):
        self.sub = subscription
        self.sdk_model = sdk_model
        self.az_compute = subscription._az_compute_cachedclient
        self.az_network = subscription._az_network_cachedclient
        self.az_resource = subscription._az_resource_cachedclient
        self.az_storage = subscription._az_storage_cachedclient
        self.az_resource.resource_groups.get.return_value = sdk_model(ResourceGroupModel, location='westus', name='rg1')
        endpoints = sdk_model(Endpoints, blob=BLOB_ENDPOINT)
        self.sa1 = sdk_model(StorageAccountModel, location='westus', id=SA_ID, name='sa1', primary_endpoints=endpoints, kind='Storage')
        self.az_storage.storage_accounts.get_properties.return_value = self.sa1
        self.vm1 = sdk_model(VirtualMachineModel, location='westus', id=VM_ID, name='vm1',
                             hardware_profile=HardwareProfile(vm_size='Standard_D2s_v3'))
        self.az_compute.virtual_machines.get.return_value = self.vm1

class TestStorageAccounts(ComputeTestBase):
    '''
    Test azshortcuts.storage_accounts
    '''
    def test_get(self):
        sa = self.sub.storage_accounts.get(SA_ID)
        self.az_storage.storage_accounts.get_properties.assert_called_once_with('rg1', 'sa1')
        assert sa.primary_blob_endpoint == BLOB_ENDPOINT
        assert sa.kind == 'Storage'
        assert sa.account_type is None

    def test_create_defaults(self):
        self.sub.storage_accounts.define('sa1') \
                .with_region('westus') \
                .with_existing_resource_group('rg1') \
                .create()
        group_name, name, parameters = lro_args(self.az_storage.storage_accounts.begin_create)
        assert (group_name, name) == ('rg1', 'sa1')
        assert parameters.sku.name == 'Standard_LRS'
        assert parameters.kind == 'Storage'
        assert parameters.location == 'westus'

    def test_create_account_type(self):
        self.sub.storage_accounts.define('sa1') \
                .with_existing_resource_group('rg1') \
                .with_account_type(StorageAccountType.STANDARD_GRS) \
                .create()
        parameters = lro_args(self.az_storage.storage_accounts.begin_create)[2]
        assert parameters.sku.name == 'Standard_GRS'
        with pytest.raises(ValueError):
            self.sub.storage_accounts.define('sa2').with_account_type('Bogus')

    def test_apply_delete(self):
        self.sub.storage_accounts.update('rg1', 'sa1').with_tag('env', 'test').apply()
        group_name, name, parameters = self.az_storage.storage_accounts.update.call_args[0]
        assert (group_name, name) == ('rg1', 'sa1')
        assert parameters.tags == {'env' : 'test'}
        self.sub.storage_accounts.delete(SA_ID)
        self.az_storage.storage_accounts.delete.assert_called_once_with('rg1', 'sa1')

    def test_list(self):
        self.az_storage.storage_accounts.list_by_resource_group.return_value = iter([self.sa1])
        assert self.sub.storage_accounts.names('rg1') == ['sa1']

class TestAvailabilitySets(ComputeTestBase):
    '''
    Test azshortcuts.availability_sets
    '''
    def test_create(self, sdk_model):
        self.az_compute.availability_sets.get.return_value = sdk_model(AvailabilitySetModel, location='westus', id=AS_ID, name='as1',
                                                                       platform_fault_domain_count=2,
                                                                       virtual_machines=[SubResource(id=VM_ID)])
        avset = self.sub.availability_sets.define('as1') \
                .with_region('westus') \
                .with_existing_resource_group('rg1') \
                .with_fault_domain_count(2) \
                .with_update_domain_count(5) \
                .create()
        group_name, name, inner = self.az_compute.availability_sets.create_or_update.call_args[0]
        assert (group_name, name) == ('rg1', 'as1')
        assert (inner.platform_fault_domain_count, inner.platform_update_domain_count) == (2, 5)
        assert avset.virtual_machine_ids == [VM_ID]
        assert avset.fault_domain_count == 2

    def test_list_delete(self, sdk_model):
        self.az_compute.availability_sets.list_by_subscription.return_value = iter([sdk_model(AvailabilitySetModel, location='westus', id=AS_ID, name='as1')])
        assert [x.resource_group for x in self.sub.availability_sets.list()] == ['rg1']
        self.sub.availability_sets.delete(AS_ID)
        self.az_compute.availability_sets.delete.assert_called_once_with('rg1', 'as1')

class TestVirtualMachines(ComputeTestBase):
    '''
    Test azshortcuts.virtual_machines
    '''
    def define_vm(self, name):
        return self.sub.virtual_machines.define(name) \
                .with_region('westus') \
                .with_admin_username('azureuser') \
                .with_admin_password('Secret123!') \
                .with_image_published_by('Canonical') \
                .with_image_offer('UbuntuServer') \
                .with_image_sku('18.04-LTS') \
                .with_latest_image_version() \
                .with_size('Standard_D2s_v3')

    def test_vhd_uri(self):
        assert vhd_uri(BLOB_ENDPOINT, 'vm1') == 'https://sa1.blob.core.windows.net/vhdvm1/vhdvm1.vhd'
        assert vhd_uri(BLOB_ENDPOINT.rstrip('/'), 'vm1') == 'https://sa1.blob.core.windows.net/vhdvm1/vhdvm1.vhd'

    def test_create_existing(self):
        vm = self.define_vm('vm1') \
                .with_existing_resource_group('rg1') \
                .with_existing_storage_account(SA_ID) \
                .with_existing_network_interface(NIC_ID) \
                .with_availability_set(AS_ID) \
                .with_custom_data('#!/bin/sh\necho hi\n') \
                .create()
        self.az_storage.storage_accounts.begin_create.assert_not_called()
        self.az_network.network_interfaces.begin_create_or_update.assert_not_called()
        group_name, name, inner = lro_args(self.az_compute.virtual_machines.begin_create_or_update)
        assert (group_name, name) == ('rg1', 'vm1')
        os_disk = inner.storage_profile.os_disk
        assert os_disk.name == 'osdisk'
        assert os_disk.vhd.uri == 'https://sa1.blob.core.windows.net/vhdvm1/vhdvm1.vhd'
        assert inner.os_profile.computer_name == 'vm1'
        assert inner.os_profile.admin_username == 'azureuser'
        assert base64.b64decode(inner.os_profile.custom_data) == b'#!/bin/sh\necho hi\n'
        assert [(x.id, x.primary) for x in inner.network_profile.network_interfaces] == [(NIC_ID, True)]
        assert inner.availability_set.id == AS_ID
        assert inner.storage_profile.image_reference.version == 'latest'
        self.az_compute.virtual_machines.get.assert_called_with('rg1', 'vm1', expand='instanceView')
        assert vm.inner is self.vm1

    def test_storage_account_by_name(self):
        self.define_vm('vm1') \
                .with_existing_resource_group('rg1') \
                .with_existing_storage_account('sa1') \
                .with_existing_network_interface(NIC_ID) \
                .create()
        self.az_storage.storage_accounts.get_properties.assert_called_with('rg1', 'sa1')

    def test_storage_account_elsewhere(self):
        self.az_storage.storage_accounts.get_properties.side_effect = ResourceNotFoundError('x')
        self.az_storage.storage_accounts.list.return_value = iter([self.sa1])
        self.define_vm('vm1') \
                .with_existing_resource_group('rg1') \
                .with_existing_storage_account('sa1') \
                .with_existing_network_interface(NIC_ID) \
                .create()
        os_disk = lro_args(self.az_compute.virtual_machines.begin_create_or_update)[2].storage_profile.os_disk
        assert os_disk.vhd.uri.startswith(BLOB_ENDPOINT)

    def test_storage_account_missing(self):
        self.az_storage.storage_accounts.get_properties.side_effect = ResourceNotFoundError('x')
        self.az_storage.storage_accounts.list.return_value = iter([])
        with pytest.raises(ResourceNotFound):
            self.define_vm('vm1') \
                    .with_existing_resource_group('rg1') \
                    .with_existing_storage_account('nope') \
                    .with_existing_network_interface(NIC_ID) \
                    .create()
        self.az_compute.virtual_machines.begin_create_or_update.assert_not_called()

    def test_create_defaults(self, sdk_model):
        self.az_resource.resource_groups.get.return_value = sdk_model(ResourceGroupModel, location='westus', name='LongVirtualMachineNamegroup')
        front = SubnetModel(name='front', id=VNET_ID + '/subnets/front', address_prefix='10.0.0.0/16')
        self.az_network.virtual_networks.get.return_value = sdk_model(VirtualNetwork, location='westus', id=VNET_ID, name='vnet1',
                                                                      address_space=AddressSpace(address_prefixes=['10.0.0.0/16']),
                                                                      subnets=[front])
        self.az_network.public_ip_addresses.get.return_value = sdk_model(PublicIPAddress, location='westus', id=PIP_ID, name='pip1')
        self.az_network.network_security_groups.get.return_value = sdk_model(NetworkSecurityGroupModel, location='westus', id=NSG_ID, name='nsg1')
        self.az_network.network_interfaces.get.return_value = sdk_model(NetworkInterfaceModel, location='westus', id=NIC_ID, name='nic1')
        self.define_vm('LongVirtualMachineName').create()
        group = 'LongVirtualMachineNamegroup'
        self.az_resource.resource_groups.create_or_update.assert_called_once_with(group, {'location' : 'westus', 'tags' : dict()})
        assert lro_args(self.az_storage.storage_accounts.begin_create)[:2] == (group, 'storelongvirtualmachinename')
        assert lro_args(self.az_network.virtual_networks.begin_create_or_update)[:2] == (group, 'LongVirtualMachineNamenet')
        assert lro_args(self.az_network.public_ip_addresses.begin_create_or_update)[:2] == (group, 'longvirtualmachinename')
        assert lro_args(self.az_network.network_security_groups.begin_create_or_update)[:2] == (group, 'LongVirtualMachineNamenicset')
        assert lro_args(self.az_network.network_interfaces.begin_create_or_update)[:2] == (group, 'LongVirtualMachineNamenic')
        group_name, name, inner = lro_args(self.az_compute.virtual_machines.begin_create_or_update)
        assert (group_name, name) == (group, 'LongVirtualMachineName')
        assert inner.os_profile.computer_name == 'LongVirtualMach'
        assert inner.network_profile.network_interfaces[0].id == NIC_ID

    def test_incomplete(self):
        with pytest.raises(DefinitionIncomplete) as exc_info:
            self.sub.virtual_machines.define('vm1') \
                    .with_admin_username('azureuser') \
                    .with_image_published_by('Canonical') \
                    .create()
        assert exc_info.value.missing == ['admin password', 'image offer', 'image sku', 'image version', 'size']
        self.az_resource.resource_groups.create_or_update.assert_not_called()

    def test_computer_name_length(self):
        with pytest.raises(ValueError):
            self.sub.virtual_machines.define('vm1').with_computer_name('x' * 16)

    def test_getters(self, sdk_model):
        self.vm1.instance_view = sdk_model(VirtualMachineInstanceView, platform_fault_domain=1, platform_update_domain=3, rdp_thumb_print='abc')
        vm = self.sub.virtual_machines.get(VM_ID)
        assert vm.size == 'Standard_D2s_v3'
        assert vm.platform_fault_domain == 1
        assert vm.platform_update_domain == 3
        assert vm.remote_desktop_thumbprint == 'abc'
        assert vm.vm_agent_version is None
        assert vm.network_interface_ids == list()
        assert not vm.is_boot_diagnostics_enabled
        vm.with_boot_diagnostics(BLOB_ENDPOINT)
        assert vm.is_boot_diagnostics_enabled
        assert vm.boot_diagnostics_storage == BLOB_ENDPOINT

    def test_apply(self):
        self.sub.virtual_machines.update('rg1', 'vm1').with_tag('env', 'test').with_size('Standard_D4s_v3').apply()
        group_name, name, parameters = lro_args(self.az_compute.virtual_machines.begin_update)
        assert (group_name, name) == ('rg1', 'vm1')
        assert parameters.tags == {'env' : 'test'}
        assert parameters.hardware_profile.vm_size == 'Standard_D4s_v3'

    def test_list_delete(self):
        self.az_compute.virtual_machines.list_all.return_value = iter([self.vm1])
        assert self.sub.virtual_machines.names() == ['vm1']
        self.sub.virtual_machines.delete(VM_ID)
        self.az_compute.virtual_machines.begin_delete.assert_called_once_with('rg1', 'vm1', polling=True)

class TestComputeCatalog(ComputeTestBase):
    '''
    Test azshortcuts.compute_catalog
    '''
    PUBLISHER_ID = f'/Subscriptions/{SUB}/Providers/Microsoft.Compute/Locations/westus/Publishers/Canonical'

    def test_sizes(self):
        self.az_compute.virtual_machine_sizes.list.return_value = iter([VirtualMachineSize(name='Standard_D2s_v3', number_of_cores=2, memory_in_mb=8192),
                                                                        VirtualMachineSize(name='Basic_A0', number_of_cores=1, memory_in_mb=768)])
        sizes = self.sub.sizes.as_map('West US')
        self.az_compute.virtual_machine_sizes.list.assert_called_once_with('westus')
        assert sorted(sizes) == ['Basic_A0', 'Standard_D2s_v3']
        assert sizes['Standard_D2s_v3'].number_of_cores == 2
        assert sizes['Basic_A0'].memory_in_mb == 768

    def test_image_hierarchy(self):
        images = self.az_compute.virtual_machine_images
        images.list_publishers.return_value = iter([VirtualMachineImageResource(name='Canonical', location='westus', id=self.PUBLISHER_ID)])
        images.list_offers.return_value = iter([VirtualMachineImageResource(name='UbuntuServer', location='westus')])
        images.list_skus.return_value = iter([VirtualMachineImageResource(name='18.04-LTS', location='westus')])
        images.list.return_value = iter([VirtualMachineImageResource(name='18.04.202101010', location='westus')])
        publisher = self.sub.publishers.get_in('westus', 'canonical')
        offer, = publisher.offers()
        sku, = offer.skus()
        version, = sku.versions()
        images.list_offers.assert_called_once_with('westus', 'Canonical')
        images.list_skus.assert_called_once_with('westus', 'Canonical', 'UbuntuServer')
        images.list.assert_called_once_with('westus', 'Canonical', 'UbuntuServer', '18.04-LTS')
        assert version.name == '18.04.202101010'
        assert version.sku.offer.publisher is publisher

    def test_publisher_by_id(self):
        self.az_compute.virtual_machine_images.list_publishers.return_value = iter([VirtualMachineImageResource(name='Canonical', location='westus', id=self.PUBLISHER_ID)])
        publisher = self.sub.publishers.get(self.PUBLISHER_ID)
        self.az_compute.virtual_machine_images.list_publishers.assert_called_once_with('westus')
        assert publisher.region == 'westus'

    def test_publisher_missing(self):
        self.az_compute.virtual_machine_images.list_publishers.return_value = iter([])
        with pytest.raises(ResourceNotFound):
            self.sub.publishers.get_in('westus', 'Nobody')
        with pytest.raises(ValueError):
            self.sub.publishers.get('Canonical')
