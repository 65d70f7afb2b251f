# -*- coding: utf-8 -*-

#
#
#  Copyright 2013 Netflix, Inc.
#
#     Licensed under the Apache License, Version 2.0 (the "License");
#     you may not use this file except in compliance with the License.
#     You may obtain a copy of the License at
#
#         http://www.apache.org/licenses/LICENSE-2.0
#
#     Unless required by applicable law or agreed to in writing, software
#     distributed under the License is distributed on an "AS IS" BASIS,
#     WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#     See the License for the specific language governing permissions and
#     limitations under the License.
#
#

"""
ebsops.cli
==========
command-line entry
"""
import argparse
import logging
import sys

import yaml
from botocore.exceptions import BotoCoreError, ClientError

import ebsops
from ebsops.config import init_defaults
from ebsops.environment import new_env_client
from ebsops.exceptions import EbsOpsException
from ebsops.models import Volume


__all__ = ('run',)
log = logging.getLogger(__name__)


def labels_arg(value):
    key, sep, val = value.partition('=')
    if not sep or not key:
        raise argparse.ArgumentTypeError('expected key=value, got {0!r}'.format(value))
    return key, val


def _labels(pairs):
    return dict(pairs or ())


def do_create(ops, args):
    template = Volume(size=args.size, availability_zone=args.zone, volume_type=args.type, iops=args.iops,
                      encrypted=args.encrypted, kms_key_id=args.kms_key_id, snapshot_id=args.snapshot)
    return ops.create(template, _labels(args.label)).to_dict()


def do_delete(ops, args):
    ops.delete(args.volume_id)


def do_attach(ops, args):
    return {'device_path': ops.attach(args.volume_id)}


def do_detach(ops, args):
    ops.detach_from(args.volume_id, args.instance or ops.instance_id)


def do_inspect(ops, args):
    return [v.to_dict() for v in ops.inspect(args.volume_ids)]


def do_enumerate(ops, args):
    sets = ops.enumerate(labels=_labels(args.label), set_identifier=args.set_identifier)
    return dict((key, [v.to_dict() for v in volumes]) for key, volumes in sets.items())


def do_snapshot(ops, args):
    return ops.snapshot(args.volume_id).to_dict()


def do_snapshot_delete(ops, args):
    ops.snapshot_delete(args.snapshot_id)


def do_tag(ops, args):
    ops.apply_tags(args.volume_id, _labels(args.labels))


def do_untag(ops, args):
    ops.remove_tags(args.volume_id, _labels(args.labels))


def do_tags(ops, args):
    return ops.tags(args.volume_id)


def do_device_path(ops, args):
    return {'device_path': ops.device_path(args.volume_id)}


def do_mappings(ops, args):
    return ops.device_mappings()


def do_free_devices(ops, args):
    instance = ops.describe()
    return ops.free_devices(instance.get('BlockDeviceMappings', []), instance.get('RootDeviceName', ''))


def build_parser():
    parser = argparse.ArgumentParser(prog='ebsops', description='EBS volume operations for this instance')
    parser.add_argument('--version', action='version', version='%(prog)s {0}'.format(ebsops.__version__))
    parser.add_argument('--debug', action='store_true', help='Verbose debugging output')
    parser.add_argument('--provider', help='storage provider plugin (default: from configuration)')
    commands = parser.add_subparsers(dest='command', metavar='command')
    commands.required = True

    create = commands.add_parser('create', help='create a volume')
    create.add_argument('--size', type=int, help='size in GiB')
    create.add_argument('--zone', required=True, help='availability zone')
    create.add_argument('--type', default='gp2', help='volume type (default: gp2)')
    create.add_argument('--iops', type=int, help='provisioned IOPS, io1/io2 only')
    create.add_argument('--encrypted', action='store_true')
    create.add_argument('--kms-key-id', dest='kms_key_id')
    create.add_argument('--snapshot', help='source snapshot id')
    create.add_argument('--label', type=labels_arg, action='append', help='key=value tag, may be repeated')
    create.set_defaults(func=do_create)

    for name, func, help_text in (('delete', do_delete, 'delete a volume'),
                                  ('attach', do_attach, 'attach a volume to this instance'),
                                  ('snapshot', do_snapshot, 'snapshot a volume'),
                                  ('tags', do_tags, 'show the tags of a volume'),
                                  ('device-path', do_device_path, 'show the host device of an attached volume')):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument('volume_id')
        sub.set_defaults(func=func)

    detach = commands.add_parser('detach', help='detach a volume')
    detach.add_argument('volume_id')
    detach.add_argument('--instance', help='instance to detach from (default: this instance)')
    detach.set_defaults(func=do_detach)

    inspect = commands.add_parser('inspect', help='describe volumes')
    inspect.add_argument('volume_ids', nargs='+')
    inspect.set_defaults(func=do_inspect)

    enumerate_ = commands.add_parser('enumerate', help='list volumes by label')
    enumerate_.add_argument('--label', type=labels_arg, action='append', help='key=value filter, may be repeated')
    enumerate_.add_argument('--set-identifier', dest='set_identifier', default='', help='tag key to group volumes by')
    enumerate_.set_defaults(func=do_enumerate)

    snapshot_delete = commands.add_parser('snapshot-delete', help='delete a snapshot')
    snapshot_delete.add_argument('snapshot_id')
    snapshot_delete.set_defaults(func=do_snapshot_delete)

    for name, func, help_text in (('tag', do_tag, 'add tags to a volume'),
                                  ('untag', do_untag, 'remove tags from a volume')):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument('volume_id')
        sub.add_argument('labels', type=labels_arg, nargs='+', metavar='key=value')
        sub.set_defaults(func=func)

    for name, func, help_text in (('mappings', do_mappings, 'show host devices of attached volumes'),
                                  ('free-devices', do_free_devices, 'show device names free for attachment')):
        sub = commands.add_parser(name, help=help_text)
        sub.set_defaults(func=func)

    return parser


def main(argv=None, client_factory=new_env_client):
    args = build_parser().parse_args(argv)

    try:
        config = init_defaults(debug=args.debug)
        ops = client_factory(config=config, provider=args.provider or config.get('provider', 'aws'))
        result = args.func(ops, args)
    except (EbsOpsException, ClientError, BotoCoreError) as e:
        log.critical('{0} failed: {1}'.format(args.command, e))
        log.debug('{0} failed'.format(args.command), exc_info=True)
        return 1

    if result is not None:
        sys.stdout.write(yaml.safe_dump(result, default_flow_style=False))
    return 0


def run():
    sys.exit(main())
