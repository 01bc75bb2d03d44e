import pyfiber.balance
import pyfiber.config
import pyfiber.core
import pyfiber.error
import pyfiber.lockargs
import pyfiber.rpc
import pyfiber.trace
import pyfiber.txmsg
import pyfiber.uint
import pyfiber.witness
